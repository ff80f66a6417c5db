import json
import os
import tempfile
import unittest
from unittest import mock

# Set cache dir to a temp dir before importing the CLI
tmpdir = tempfile.mkdtemp()
os.environ["REMOTEKV_CACHE_DIR"] = tmpdir

import httpx  # noqa: E402
import respx  # noqa: E402
from click.testing import CliRunner  # noqa: E402

from remotekv import config  # noqa: E402
from remotekv._internal import logging as internal_logging  # noqa: E402
from remotekv.cli import rkv as cli  # noqa: E402

NAMESPACE_PATH = "/accounts/acc/storage/kv/namespaces/ns"
BASE = config.API_URL + NAMESPACE_PATH
HOST = httpx.URL(config.API_URL).host
CREDENTIALS = ["--account-id", "acc", "--namespace-id", "ns", "--api-token", "tok"]


class TestKVCli(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self._env = mock.patch.dict(os.environ, {}, clear=True)
        self._env.start()

    def tearDown(self):
        internal_logging.disable()
        self._env.stop()

    def invoke(self, *args):
        result = self.runner.invoke(cli, CREDENTIALS + list(args))
        # rich wraps long lines, so compare against whitespace-normalised output
        result.flat_output = " ".join(result.output.split())
        return result

    def test_get(self):
        with respx.mock() as respx_mock:
            route = respx_mock.get(f"{BASE}/values/greeting").respond(
                200, content=b"hello"
            )
            result = self.invoke("get", "-k", "greeting")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("hello", result.flat_output)
        self.assertEqual(
            route.calls.last.request.headers["authorization"], "Bearer tok"
        )

    def test_get_json_with_metadata(self):
        with respx.mock() as respx_mock:
            respx_mock.get(f"{BASE}/values/user").respond(200, json={"name": "a"})
            respx_mock.get(f"{BASE}/metadata/user").respond(
                200, json={"result": {"owner": "b"}}
            )
            result = self.invoke("get", "-k", "user", "--type", "json", "--metadata")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"name": "a"', result.flat_output)
        self.assertIn('"owner": "b"', result.flat_output)

    def test_get_missing(self):
        with respx.mock() as respx_mock:
            respx_mock.get(f"{BASE}/values/missing").respond(404)
            result = self.invoke("get", "-k", "missing")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("not found", result.flat_output)

    def test_put(self):
        with respx.mock() as respx_mock:
            route = respx_mock.put(f"{BASE}/bulk").respond(200, json={"success": True})
            result = self.invoke(
                "put",
                "-k",
                "greeting",
                "-v",
                "hello",
                "--ttl",
                "3600",
                "--metadata",
                '{"owner": "b"}',
            )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Successfully put key", result.flat_output)
        (entry,) = json.loads(route.calls.last.request.content)
        self.assertEqual(entry["key"], "greeting")
        self.assertEqual(entry["value"], "hello")
        self.assertEqual(entry["expiration_ttl"], 3600)
        self.assertEqual(entry["metadata"], {"owner": "b"})

    def test_put_invalid_ttl(self):
        with respx.mock() as respx_mock:
            result = self.invoke("put", "-k", "greeting", "-v", "hello", "--ttl", "5")
            self.assertEqual(len(respx_mock.calls), 0)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("at least 60", result.flat_output)

    def test_put_ttl_and_expiration(self):
        result = self.invoke(
            "put", "-k", "k", "-v", "v", "--ttl", "60", "--expiration", "2000000000"
        )
        self.assertEqual(result.exit_code, 1)
        self.assertIn("mutually exclusive", result.flat_output)

    def test_delete_with_shorthand(self):
        with respx.mock() as respx_mock:
            route = respx_mock.delete(f"{BASE}/values/k").respond(200, json={})
            result = self.invoke("del", "-k", "k")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(route.called)
        self.assertIn("Successfully deleted key", result.flat_output)

    def test_list_page(self):
        with respx.mock() as respx_mock:
            route = respx_mock.route(
                method="GET", host=HOST, path__regex=r"/keys$"
            ).respond(
                200,
                json={
                    "result": [{"name": "user:1"}, {"name": "user:2"}],
                    "result_info": {"cursor": "more"},
                },
            )
            result = self.invoke("list", "--prefix", "user:", "--limit", "2")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("user:1", result.flat_output)
        self.assertIn("more", result.flat_output)
        self.assertEqual(route.calls.last.request.url.params.get("limit"), "2")

    def test_list_all(self):
        pages = {
            None: {"result": [{"name": "a"}], "result_info": {"cursor": "c1"}},
            "c1": {"result": [], "result_info": {"cursor": ""}},
        }

        def _page(request):
            return httpx.Response(200, json=pages[request.url.params.get("cursor")])

        with respx.mock() as respx_mock:
            route = respx_mock.route(
                method="GET", host=HOST, path__regex=r"/keys$"
            ).mock(side_effect=_page)
            result = self.invoke("list", "--all", "--limit", "1")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(route.call_count, 2)
        self.assertNotIn("Next cursor", result.flat_output)

    def test_remote_failure(self):
        with respx.mock() as respx_mock:
            respx_mock.delete(f"{BASE}/values/k").respond(
                403,
                json={"errors": [{"code": 10000, "message": "Authentication error"}]},
            )
            result = self.invoke("delete", "-k", "k")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("403 Error", result.flat_output)
        self.assertIn("Authentication error", result.flat_output)

    def test_get_error_status(self):
        with respx.mock() as respx_mock:
            respx_mock.get(f"{BASE}/values/k").respond(500, text="oops")
            result = self.invoke("get", "-k", "k")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("500 Error", result.flat_output)
        self.assertIn("Internal Server Error", result.flat_output)
        self.assertNotIn("Unexpected error", result.flat_output)
        self.assertNotIn("Traceback", result.flat_output)

    def test_request_trail(self):
        with respx.mock() as respx_mock:
            respx_mock.delete(f"{BASE}/values/k").respond(200, json={})
            result = self.runner.invoke(
                cli,
                CREDENTIALS + ["delete", "-k", "k"],
                env={"REMOTEKV_ENABLE_INTERNAL_LOG": "1"},
            )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(internal_logging.is_enabled())
        with open(internal_logging._LOGFILE_BASE, "r") as f:
            self.assertIn(f"DELETE {BASE}/values/k -> 200", f.read())

    def test_missing_credentials(self):
        result = self.runner.invoke(cli, ["get", "-k", "k"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn(
            "Missing account_id or namespace_id", " ".join(result.output.split())
        )

    def test_blank_option_rejected(self):
        result = self.invoke("get", "-k", " ")
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("must not be empty", result.flat_output)


if __name__ == "__main__":
    unittest.main()
