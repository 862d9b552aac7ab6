"""Tests for the studio HTTP bridge."""

import http.client
import io
import json
import threading
import urllib.error
import urllib.request
from urllib.parse import urlparse

import numpy as np
import pytest
from PIL import Image

from spectrascope.server import make_server


@pytest.fixture
def studio(monkeypatch):
    """Studio server on an ephemeral port; yields its base URL."""
    monkeypatch.setattr("builtins.print", lambda *a, **k: None)
    httpd = make_server(port=0, host="127.0.0.1")
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


def _get(url):
    with urllib.request.urlopen(url, timeout=10) as resp:
        return resp.status, resp.headers.get("Content-Type"), resp.read()


def _error(url, data=None):
    with pytest.raises(urllib.error.HTTPError) as exc_info:
        urllib.request.urlopen(url, data=data, timeout=10)
    err = exc_info.value
    return err.code, json.loads(err.read())


class TestFrameEndpoint:
    def test_get_frame(self, studio):
        status, ctype, body = _get(f"{studio}/api/frame?n=256&gridSize=16&freqA=4&freqB=40&noise=0")
        payload = json.loads(body)

        assert status == 200
        assert ctype == "application/json"
        assert payload["n"] == 256
        assert len(payload["spectrum"]) == 129
        assert len(payload["gridSpectrum"]) == 16 * 16
        spectrum = np.array(payload["spectrum"])
        assert set(np.argsort(spectrum)[-2:]) == {4, 40}

    def test_defaults_when_missing(self, studio):
        _, _, body = _get(f"{studio}/api/frame")
        payload = json.loads(body)
        assert payload["n"] == 1024
        assert payload["gridSize"] == 128

    def test_post_json(self, studio):
        body = json.dumps({"n": 64, "gridSize": 8, "noise": 0}).encode()
        req = urllib.request.Request(
            f"{studio}/api/frame", data=body, headers={"Content-Type": "application/json"}
        )
        with urllib.request.urlopen(req, timeout=10) as resp:
            payload = json.loads(resp.read())
        assert payload["n"] == 64

    def test_size_error(self, studio):
        code, payload = _error(f"{studio}/api/frame?n=300")
        assert code == 400
        assert payload["kind"] == "SizeError"

    def test_parameter_error(self, studio):
        code, payload = _error(f"{studio}/api/frame?n=64&gridSize=8&noise=2")
        assert code == 400
        assert payload["kind"] == "ParameterError"

    def test_bad_json(self, studio):
        code, payload = _error(f"{studio}/api/frame", data=b"{nope")
        assert code == 400
        assert "Invalid JSON" in payload["error"]

    def test_negative_content_length(self, studio):
        """Rejected before reading, so the handler never waits on the socket."""
        host, port = urlparse(studio).netloc.split(":")
        conn = http.client.HTTPConnection(host, int(port), timeout=5)
        try:
            conn.putrequest("POST", "/api/frame")
            conn.putheader("Content-Length", "-1")
            conn.endheaders()
            resp = conn.getresponse()
            payload = json.loads(resp.read())
        finally:
            conn.close()

        assert resp.status == 400
        assert "Content-Length" in payload["error"]

    def test_not_found(self, studio):
        code, _ = _error(f"{studio}/nothing")
        assert code == 404


class TestMediaEndpoints:
    def test_grid_png(self, studio):
        status, ctype, body = _get(f"{studio}/api/frame/grid.png?gridSize=16&n=64&scale=4")
        assert status == 200
        assert ctype == "image/png"

        img = Image.open(io.BytesIO(body))
        assert img.size == (64, 64)

    def test_grid_png_bad_scale(self, studio):
        code, _ = _error(f"{studio}/api/frame/grid.png?scale=big")
        assert code == 400

    def test_audio_wav(self, studio):
        status, ctype, body = _get(f"{studio}/api/frame/audio.wav?n=512&gridSize=8")
        assert status == 200
        assert ctype == "audio/wav"
        assert body[:4] == b"RIFF"

    def test_audio_error(self, studio):
        code, payload = _error(f"{studio}/api/frame/audio.wav?gridSize=7")
        assert code == 400
        assert payload["kind"] == "SizeError"


class TestInfoEndpoints:
    def test_info(self, studio):
        _, _, body = _get(f"{studio}/api/info")
        info = json.loads(body)
        assert info["maxN"] == 4096
        assert info["maxGridSize"] == 512
        assert info["spectrumBins"] == "n/2+1"

    def test_randomize_keeps_sizes(self, studio):
        _, _, body = _get(f"{studio}/api/randomize?n=256&gridSize=32")
        params = json.loads(body)
        assert params["n"] == 256
        assert params["gridSize"] == 32
        assert 2 <= params["freqA"] <= 24
        assert 18 <= params["freqB"] <= 96
