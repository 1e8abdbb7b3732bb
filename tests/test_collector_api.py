import logging

import pytest
from fastapi.testclient import TestClient

from reworkit.api.server import create_app
from reworkit.common.exceptions import StoreException
from reworkit.storage.sql_store import SqlResultStore
from tests.conftest import SECRET, gz


BOUNDARY = "reworkit-test-boundary"


def multipart_body(parts):
    body = bytearray()
    for name, value, filename in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        body += f"--{BOUNDARY}\r\nContent-Disposition: {disposition}\r\n\r\n".encode()
        body += value + b"\r\n"
    body += f"--{BOUNDARY}--\r\n".encode()
    return bytes(body)


def post_multipart(client, parts, secret=SECRET):
    return client.post(
        "/push_log",
        headers={
            "SECRET": secret,
            "Content-Type": f"multipart/form-data; boundary={BOUNDARY}",
        },
        content=multipart_body(parts),
    )


def push(
    client,
    package="foo",
    arch="amd64",
    success="true",
    log=b"build ok",
    secret=SECRET,
    drop=(),
):
    data = {"package": package, "arch": arch, "success": success}
    for name in drop:
        data.pop(name)

    headers = {} if secret is None else {"SECRET": secret}
    files = None if log is None else {"log": (f"{package}.log", log, "application/gzip")}
    return client.post("/push_log", headers=headers, data=data, files=files)


class TestPushLog(object):
    def test_results_for_two_arches_are_merged(self, app, log_dir):
        with TestClient(app) as client:
            assert push(client, arch="amd64", success="true", log=gz(b"amd64 log")).status_code == 200
            assert push(client, arch="arm64", success="false", log=gz(b"arm64 log")).status_code == 200

            response = client.get("/get", params={"name": "foo"})

        assert response.status_code == 200
        assert response.json() == {
            "name": "foo",
            "results": [
                {"arch": "amd64", "success": True, "log": "foo-amd64.log"},
                {"arch": "arm64", "success": False, "log": "foo-arm64.log"},
            ],
        }
        assert (log_dir / "foo-amd64.log").read_bytes() == b"amd64 log"
        assert (log_dir / "foo-arm64.log").read_bytes() == b"arm64 log"

    def test_resubmission_replaces_previous_result(self, app, log_dir):
        with TestClient(app) as client:
            push(client, success="true", log=gz(b"first"))
            push(client, success="false", log=gz(b"second"))
            response = client.get("/get", params={"name": "foo"})

        assert response.json()["results"] == [
            {"arch": "amd64", "success": False, "log": "foo-amd64.log"},
        ]
        assert (log_dir / "foo-amd64.log").read_bytes() == b"second"

    def test_response_body_is_empty(self, app):
        with TestClient(app) as client:
            response = push(client)

        assert response.status_code == 200
        assert response.content == b""
        assert "X-Request-ID" in response.headers

    @pytest.mark.parametrize("value", ["false", "True", "yes", "1", ""])
    def test_anything_but_true_is_failure(self, app, result_store, value):
        with TestClient(app) as client:
            push(client, success=value)
            response = client.get("/get", params={"name": "foo"})

        assert response.json()["results"][0]["success"] is False

    def test_missing_log_part_writes_empty_blob(self, app, log_dir):
        parts = [("package", b"foo", None), ("arch", b"amd64", None), ("success", b"true", None)]
        with TestClient(app) as client:
            assert post_multipart(client, parts).status_code == 200

        assert (log_dir / "foo-amd64.log").read_bytes() == b""

    def test_repeated_log_parts_are_concatenated(self, app, log_dir):
        with TestClient(app) as client:
            response = client.post(
                "/push_log",
                headers={"SECRET": SECRET},
                data={"package": "foo", "arch": "amd64", "success": "true"},
                files=[
                    ("log", ("a.log", gz(b"part one, "), "application/gzip")),
                    ("log", ("b.log", gz(b"part two"), "application/gzip")),
                ],
            )

        assert response.status_code == 200
        assert (log_dir / "foo-amd64.log").read_bytes() == b"part one, part two"

    @pytest.mark.parametrize("secret", ["wrong", "", None])
    def test_bad_secret_is_rejected_without_side_effects(
        self, app, result_store, log_sink, log_dir, secret
    ):
        with TestClient(app) as client:
            response = push(client, secret=secret)
            assert log_sink.pending == 0

        assert response.status_code == 500
        assert response.text == "Invalid secret token"
        assert not log_dir.exists() or list(log_dir.iterdir()) == []

    def test_bad_secret_leaves_store_untouched(self, app):
        with TestClient(app) as client:
            push(client, secret="wrong")
            response = client.get("/get", params={"name": "foo"})

        assert response.status_code == 404

    @pytest.mark.parametrize("field", ["package", "arch", "success"])
    def test_missing_field_is_rejected(self, app, log_sink, log_dir, field):
        with TestClient(app) as client:
            response = push(client, drop=(field,))
            assert log_sink.pending == 0

        assert response.status_code == 500
        assert response.text == f"Missing {field} field"
        assert not log_dir.exists() or list(log_dir.iterdir()) == []

    def test_first_missing_field_is_reported(self, app):
        with TestClient(app) as client:
            response = push(client, drop=("arch", "success"))

        assert response.text == "Missing arch field"

    def test_unknown_fields_are_ignored(self, app):
        with TestClient(app) as client:
            response = client.post(
                "/push_log",
                headers={"SECRET": SECRET},
                data={"package": "foo", "arch": "amd64", "success": "true", "extra": "x"},
                files={"log": ("foo.log", gz(b"ok"), "application/gzip")},
            )

        assert response.status_code == 200

    def test_store_failure_is_reported(self, app, result_store, log_dir, mocker):
        mocker.patch.object(
            result_store,
            "upsert",
            side_effect=StoreException(message="store is down", operation="upsert"),
        )

        with TestClient(app) as client:
            response = push(client, log=gz(b"still written"))

        assert response.status_code == 500
        assert response.text == "store is down"
        assert (log_dir / "foo-amd64.log").read_bytes() == b"still written"

    def test_blob_failure_does_not_fail_submission(self, app, log_dir, caplog):
        with caplog.at_level(logging.ERROR):
            with TestClient(app) as client:
                response = push(client, log=b"not a gzip stream")
                result = client.get("/get", params={"name": "foo"})

        assert response.status_code == 200
        assert result.json()["results"][0]["log"] == "foo-amd64.log"
        assert not (log_dir / "foo-amd64.log").exists()
        assert "Error writing log" in caplog.text

    def test_truncated_log_is_not_written(self, app, log_dir):
        with TestClient(app) as client:
            response = push(client, log=gz(b"x" * 5000)[:-8])

        assert response.status_code == 200
        assert not (log_dir / "foo-amd64.log").exists()

    def test_log_part_without_filename_keeps_raw_bytes(self, app, log_dir):
        payload = gz(b"\xff\xfe binary build output \x80")
        parts = [
            ("package", b"foo", None),
            ("arch", b"amd64", None),
            ("success", b"true", None),
            ("log", payload, None),
        ]

        with TestClient(app) as client:
            response = post_multipart(client, parts)

        assert response.status_code == 200
        assert (log_dir / "foo-amd64.log").read_bytes() == b"\xff\xfe binary build output \x80"

    def test_form_encoded_body_is_rejected(self, app, log_sink):
        with TestClient(app) as client:
            response = push(client, log=None)
            assert log_sink.pending == 0
            result = client.get("/get", params={"name": "foo"})

        assert response.status_code == 500
        assert response.text.startswith("Expected a multipart/form-data body")
        assert result.status_code == 404

    @pytest.mark.parametrize("field", ["package", "arch"])
    def test_empty_field_is_rejected(self, app, log_dir, field):
        with TestClient(app) as client:
            push(client, log=gz(b"good"))
            response = push(client, log=gz(b"bad"), **{field: ""})
            result = client.get("/get", params={"name": "foo"})

        assert response.status_code == 500
        assert response.text == f"Empty {field} field"
        assert result.json()["results"] == [
            {"arch": "amd64", "success": True, "log": "foo-amd64.log"},
        ]
        assert sorted(p.name for p in log_dir.iterdir()) == ["foo-amd64.log"]

    def test_empty_arch_never_reaches_sql_store(self, collector_settings, log_sink, log_dir, tmp_path):
        store = SqlResultStore(f"sqlite:///{tmp_path / 'results.db'}")
        app = create_app(settings=collector_settings, store=store, log_sink=log_sink)

        with TestClient(app) as client:
            assert push(client, log=gz(b"good")).status_code == 200
            assert push(client, arch="", log=gz(b"bad")).status_code == 500
            result = client.get("/get", params={"name": "foo"})

        assert result.status_code == 200
        assert [r["arch"] for r in result.json()["results"]] == ["amd64"]
        assert sorted(p.name for p in log_dir.iterdir()) == ["foo-amd64.log"]


class TestGetPackage(object):
    def test_unknown_package_is_not_found(self, app):
        with TestClient(app) as client:
            response = client.get("/get", params={"name": "nope"})

        assert response.status_code == 404
        assert response.text == "Package nope not found"

    def test_missing_name_is_rejected(self, app):
        with TestClient(app) as client:
            response = client.get("/get")

        assert response.status_code == 500
        assert response.text == "Missing name field"

    def test_unexpected_store_error_is_reported(self, app, result_store, mocker):
        mocker.patch.object(result_store, "get", side_effect=RuntimeError("kaboom"))

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/get", params={"name": "foo"})

        assert response.status_code == 500


class TestHealth(object):
    def test_health_reports_store(self, app):
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "alive"
        assert body["store"] == {"status": "healthy", "backend": "memory"}
