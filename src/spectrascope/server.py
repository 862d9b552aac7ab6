#!/usr/bin/env python3
"""
Development server for Spectrascope Studio front-ends.

Every request carries its own parameters and computes exactly one
frame; the server keeps no state between requests.
"""

import io
import json
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

import numpy as np

from spectrascope import __version__
from spectrascope.audio import loop_buffer, wav_bytes
from spectrascope.core.errors import ErrorKind
from spectrascope.core.synthesizer import SynthesisParams, randomize_params
from spectrascope.engine import FrameEngine
from spectrascope.visualizers.palette import grid_image

ERROR_STATUS = {
    ErrorKind.SIZE: 400,
    ErrorKind.PARAMETER: 400,
    ErrorKind.INTERNAL: 500,
}

MAX_IMAGE_SCALE = 16


class StudioHandler(BaseHTTPRequestHandler):
    """HTTP handler exposing the frame engine."""

    engine = FrameEngine()

    def do_GET(self):
        """Handle GET requests."""
        parsed = urlparse(self.path)
        query = parse_qs(parsed.query)

        if parsed.path == "/api/frame":
            self.handle_frame(query)
        elif parsed.path == "/api/frame/grid.png":
            self.handle_grid_png(query)
        elif parsed.path == "/api/frame/audio.wav":
            self.handle_audio(query)
        elif parsed.path == "/api/randomize":
            self.handle_randomize(query)
        elif parsed.path == "/api/info":
            self.handle_info()
        else:
            self.send_json(404, {"error": "Not found"})

    def do_POST(self):
        """Handle POST requests; the body is a JSON options object."""
        parsed = urlparse(self.path)
        if parsed.path != "/api/frame":
            self.send_json(404, {"error": "Not found"})
            return

        try:
            content_length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            self.send_json(400, {"error": "Content-Length must be an integer"})
            return
        if content_length < 0:
            self.send_json(400, {"error": "Content-Length must not be negative"})
            return

        try:
            body = self.rfile.read(content_length) if content_length else b"{}"
            options = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            self.send_json(400, {"error": f"Invalid JSON body: {e}"})
            return

        if not isinstance(options, dict):
            self.send_json(400, {"error": "missing options object"})
            return

        self.handle_frame(options)

    def send_json(self, status: int, payload: dict):
        """Write a JSON response."""
        self.send_bytes(status, json.dumps(payload).encode(), "application/json")

    def send_bytes(self, status: int, data: bytes, content_type: str):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _compute(self, options):
        """Compute a frame, answering with an error response on failure."""
        result = self.engine.compute_frame(SynthesisParams.from_mapping(options))
        if not result.ok:
            self.send_json(ERROR_STATUS[result.error.kind], result.to_dict())
            return None
        return result

    def handle_frame(self, options):
        """Full frame as JSON."""
        result = self._compute(options)
        if result is not None:
            self.send_json(200, result.to_dict())

    def handle_grid_png(self, query):
        """Palette-mapped grid spectrum as PNG."""
        try:
            scale = int(query.get("scale", ["1"])[0])
        except ValueError:
            self.send_json(400, {"error": "scale must be an integer"})
            return
        scale = min(max(scale, 1), MAX_IMAGE_SCALE)

        result = self._compute(query)
        if result is None:
            return

        buf = io.BytesIO()
        grid_image(result.grid_spectrum, scale=scale).save(buf, format="PNG")
        self.send_bytes(200, buf.getvalue(), "image/png")

    def handle_audio(self, query):
        """Loopable waveform as WAV."""
        result = self._compute(query)
        if result is None:
            return

        samples = loop_buffer(result.signal, gain=self.engine.cfg.audio_gain)
        self.send_bytes(200, wav_bytes(samples), "audio/wav")

    def handle_randomize(self, query):
        """Random tone pair and noise on top of the supplied parameters."""
        base = SynthesisParams.from_mapping(query)
        params = randomize_params(np.random.default_rng(), base)
        self.send_json(200, params.to_dict())

    def handle_info(self):
        """Version and supported sizes."""
        cfg = self.engine.cfg
        self.send_json(200, {
            "version": __version__,
            "minSize": cfg.min_size,
            "maxN": cfg.max_n,
            "maxGridSize": cfg.max_grid_size,
            "spectrumBins": "n/2+1" if cfg.half_spectrum else "n",
        })

    def log_message(self, format, *args):
        """Custom log format."""
        print(f"[Spectrascope] {format % args}")


def make_server(port: int = 8080, host: str = "") -> ThreadingHTTPServer:
    """Bind the studio server without starting it."""
    return ThreadingHTTPServer((host, port), StudioHandler)


def run_server(port: int = 8080):
    """Run the development server."""
    httpd = make_server(port)

    print(f"Spectrascope Studio running at http://localhost:{port}")
    print("Press Ctrl+C to stop")

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        httpd.server_close()


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Spectrascope Studio Server")
    parser.add_argument("-p", "--port", type=int, default=8080, help="Port to run on")
    args = parser.parse_args()

    run_server(args.port)


if __name__ == "__main__":
    main()
