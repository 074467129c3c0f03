"""
Flask-based Web API for PkgScout.

Provides REST endpoints for package discovery from uploaded script
archives or inline script text.

Endpoints:
    POST /api/discover - Discover packages from a zip upload or JSON scripts
    GET /api/health - Health check endpoint
"""

import tempfile
import zipfile
from pathlib import Path
from typing import Any

from flask import Flask, Response, jsonify, request

from pkgscout import __version__
from pkgscout.catalog import build_catalog
from pkgscout.discovery import discover_scripts
from pkgscout.renderer import report_to_dict
from pkgscout.skiplist import apply_skip_list

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024  # 10MB max upload


def extract_zip(zip_file, target_dir: Path) -> None:
    """
    Extract a zip file to a target directory.

    Args:
        zip_file: The uploaded zip file object.
        target_dir: The directory to extract into.

    Raises:
        ValueError: If extraction fails or zip is invalid.
    """
    try:
        with zipfile.ZipFile(zip_file, "r") as zf:
            # Security check: prevent path traversal
            for member in zf.namelist():
                member_path = Path(member)
                if member_path.is_absolute() or ".." in member_path.parts:
                    raise ValueError(f"Invalid path in zip: {member}")
            zf.extractall(target_dir)
    except zipfile.BadZipFile:
        raise ValueError("Invalid or corrupted zip file")


def parse_inline_scripts(data: Any) -> list[tuple[str, str]]:
    """
    Read `{"scripts": [{"name": ..., "text": ...}]}` into source pairs.

    Args:
        data: The decoded JSON request body.

    Returns:
        (name, text) pairs in request order.

    Raises:
        ValueError: If the payload is not in the expected shape.
    """
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object with a 'scripts' list")

    scripts = data.get("scripts")
    if not isinstance(scripts, list):
        raise ValueError("'scripts' must be a list of {name, text} objects")

    sources = []
    for index, script in enumerate(scripts):
        if not isinstance(script, dict):
            raise ValueError(f"scripts[{index}] must be an object")
        name = script.get("name")
        text = script.get("text")
        if not isinstance(name, str) or not name:
            raise ValueError(f"scripts[{index}].name must be a non-empty string")
        if not isinstance(text, str):
            raise ValueError(f"scripts[{index}].text must be a string")
        sources.append((name, text))
    return sources


def build_report(sources: list[tuple[str, str]], warnings: list[str]) -> dict[str, Any]:
    """Catalog the sources and build the JSON response body."""
    catalog = build_catalog(sources)
    all_warnings = warnings + catalog.warnings
    results = apply_skip_list(catalog.packages)
    return {
        "success": True,
        "report": report_to_dict(results, all_warnings),
        "warnings": all_warnings,
    }


@app.route("/api/health", methods=["GET"])
def health_check() -> Response:
    """Health check endpoint."""
    return jsonify({"status": "healthy", "version": __version__})


@app.route("/api/discover", methods=["POST"])
def discover_packages() -> tuple[Response, int]:
    """
    Discover packages from uploaded scripts.

    Request can be:
        - multipart/form-data with 'file' field containing a zip of scripts
        - JSON with 'scripts': [{"name": "dev.ps1", "text": "..."}]

    Returns:
        JSON response with:
            - report: summary, packages and warnings
            - warnings: Any warnings from processing
    """
    try:
        if request.is_json:
            sources = parse_inline_scripts(request.get_json(silent=True) or {})
            return jsonify(build_report(sources, [])), 200

        if "file" not in request.files:
            return jsonify({"error": "Either a 'file' upload or JSON 'scripts' required"}), 400

        uploaded_file = request.files["file"]
        if not uploaded_file.filename:
            return jsonify({"error": "No file selected"}), 400
        if not uploaded_file.filename.endswith(".zip"):
            return jsonify({"error": "Only .zip files are supported"}), 400

        with tempfile.TemporaryDirectory() as tmpdir:
            scripts_path = Path(tmpdir) / "scripts"
            scripts_path.mkdir()
            extract_zip(uploaded_file, scripts_path)

            discovery = discover_scripts(scripts_path)
            sources = discovery.load_sources()
            return jsonify(build_report(sources, discovery.warnings)), 200

    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return jsonify({"error": f"Processing failed: {str(e)}"}), 500


@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle file too large errors."""
    return jsonify({"error": "File too large. Maximum size is 10MB."}), 413


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Configured Flask application instance.
    """
    return app


def main() -> None:
    """Run the development server."""
    print("Starting PkgScout API server...")
    print()
    print("API Endpoints:")
    print("  POST /api/discover - Discover packages from a zip or JSON scripts")
    print("  GET  /api/health   - Health check")
    print()
    app.run(host="127.0.0.1", port=5001, debug=False)


if __name__ == "__main__":
    main()
