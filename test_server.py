"""Tests for the HTTP server over a mounted droplet record."""

import threading
import unittest
from email.utils import formatdate
from http.client import HTTPConnection

from server import make_server, parse_range
from structfs import StructFS
from test_structfs import NAMESERVERS, ROOT_LISTING, sample_droplet


class TestParseRange(unittest.TestCase):
    def test_forms(self):
        self.assertEqual(parse_range("bytes=0-3", 10), (0, 4))
        self.assertEqual(parse_range("bytes=4-", 10), (4, 10))
        self.assertEqual(parse_range("bytes=-3", 10), (7, 10))
        self.assertEqual(parse_range("bytes=5-100", 10), (5, 10))
        self.assertEqual(parse_range("bytes=-100", 10), (0, 10))

    def test_ignored(self):
        self.assertIsNone(parse_range("bytes=0-1,3-4", 10))
        self.assertIsNone(parse_range("items=0-1", 10))
        self.assertIsNone(parse_range("bytes=-", 10))

    def test_unsatisfiable(self):
        for header in ["bytes=10-", "bytes=20-30", "bytes=5-2", "bytes=-0"]:
            with self.subTest(header=header):
                with self.assertRaises(ValueError):
                    parse_range(header, 10)


class _ServerTest(unittest.TestCase):
    prefix = "/"

    @classmethod
    def setUpClass(cls):
        cls.fs = StructFS(sample_droplet(), "json")
        cls.server = make_server(cls.fs, "127.0.0.1", 0, cls.prefix)
        cls.port = cls.server.server_address[1]
        cls.thread = threading.Thread(target=cls.server.serve_forever)
        cls.thread.daemon = True
        cls.thread.start()

    @classmethod
    def tearDownClass(cls):
        cls.server.shutdown()
        cls.server.server_close()
        cls.thread.join(timeout=2)

    def _request(self, method: str, path: str, headers: dict | None = None):
        conn = HTTPConnection("127.0.0.1", self.port)
        conn.request(method, path, headers=headers or {})
        resp = conn.getresponse()
        data = resp.read()
        conn.close()
        return resp, data


class TestServer(_ServerTest):
    # --- GET ---

    def test_root(self):
        resp, data = self._request("GET", "/")
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, ROOT_LISTING)
        self.assertEqual(resp.getheader("Content-Type"), "application/octet-stream")

    def test_leaf(self):
        resp, data = self._request("GET", "/droplet_id")
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, b"2756294")
        self.assertEqual(resp.getheader("Content-Length"), "7")

    def test_nested(self):
        _, data = self._request("GET", "/dns/")
        self.assertEqual(data, b"nameservers")
        _, data = self._request("GET", "/dns/nameservers")
        self.assertEqual(data, NAMESERVERS)

    def test_quoted_path(self):
        resp, data = self._request("GET", "/host%6Eame")
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, b"sample-droplet")

    def test_not_found(self):
        for path in ["/nonexistent", "/dns/nonexistent", "/region/"]:
            with self.subTest(path=path):
                resp, data = self._request("GET", path)
                self.assertEqual(resp.status, 404)
                self.assertEqual(data, b"Not Found")

    def test_last_modified(self):
        resp, _ = self._request("GET", "/region")
        self.assertTrue(resp.getheader("Last-Modified").endswith("GMT"))
        self.assertEqual(resp.getheader("Accept-Ranges"), "bytes")

    # --- HEAD ---

    def test_head(self):
        resp, data = self._request("HEAD", "/hostname")
        self.assertEqual(resp.status, 200)
        self.assertEqual(resp.getheader("Content-Length"), "14")
        self.assertEqual(data, b"")

    # --- Ranges ---

    def test_range(self):
        resp, data = self._request("GET", "/hostname", {"Range": "bytes=7-13"})
        self.assertEqual(resp.status, 206)
        self.assertEqual(data, b"droplet")
        self.assertEqual(resp.getheader("Content-Range"), "bytes 7-13/14")

    def test_suffix_range(self):
        resp, data = self._request("GET", "/dns/nameservers", {"Range": "bytes=-7"})
        self.assertEqual(resp.status, 206)
        self.assertEqual(data, b"8.8.8.8")

    def test_unsatisfiable_range(self):
        resp, _ = self._request("GET", "/region", {"Range": "bytes=50-"})
        self.assertEqual(resp.status, 416)
        self.assertEqual(resp.getheader("Content-Range"), "bytes */4")

    def test_multi_range_serves_full_body(self):
        resp, data = self._request("GET", "/region", {"Range": "bytes=0-0,2-3"})
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, b"nyc3")

    # --- Conditional GET ---

    def test_if_modified_since_future(self):
        future = formatdate(4102444800, usegmt=True)
        resp, data = self._request("GET", "/region", {"If-Modified-Since": future})
        self.assertEqual(resp.status, 304)
        self.assertEqual(data, b"")

    def test_if_modified_since_past(self):
        past = formatdate(0, usegmt=True)
        resp, data = self._request("GET", "/region", {"If-Modified-Since": past})
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, b"nyc3")

    def test_if_modified_since_garbage(self):
        resp, data = self._request("GET", "/region", {"If-Modified-Since": "yesterday"})
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, b"nyc3")

    # --- Other methods ---

    def test_options(self):
        resp, _ = self._request("OPTIONS", "/")
        self.assertEqual(resp.status, 200)
        self.assertIn("GET", resp.getheader("Allow"))

    def test_write_methods_rejected(self):
        for method in ["PUT", "DELETE", "POST", "PATCH", "MKCOL"]:
            with self.subTest(method=method):
                resp, _ = self._request(method, "/hostname")
                self.assertEqual(resp.status, 405)


class TestServerPrefix(_ServerTest):
    prefix = "/metadata/v1/"

    def test_root(self):
        resp, data = self._request("GET", "/metadata/v1/")
        self.assertEqual(resp.status, 200)
        self.assertEqual(data, ROOT_LISTING)

    def test_root_without_slash(self):
        _, data = self._request("GET", "/metadata/v1")
        self.assertEqual(data, ROOT_LISTING)

    def test_droplet_id(self):
        _, data = self._request("GET", "/metadata/v1/droplet_id")
        self.assertEqual(data, b"2756294")

    def test_dns(self):
        _, data = self._request("GET", "/metadata/v1/dns/")
        self.assertEqual(data, b"nameservers")
        _, data = self._request("GET", "/metadata/v1/dns/nameservers")
        self.assertEqual(data, NAMESERVERS)

    def test_outside_prefix(self):
        for path in ["/droplet_id", "/metadata/v2/droplet_id", "/metadata/v1x"]:
            with self.subTest(path=path):
                resp, _ = self._request("GET", path)
                self.assertEqual(resp.status, 404)


if __name__ == "__main__":
    unittest.main()
