"""Simple Web UI for the PDF forms filler.

Upload a fillable PDF plus a JSON value map and get the filled PDF back;
or upload a PDF alone to list its fields.
"""

import json
import os
import shutil
import tempfile
from pathlib import Path

from flask import Flask, Response, jsonify, render_template_string, request

from .config import FillerConfig, load_config
from .errors import FormFillerError, FormNotFoundError
from .form_filler import fill_form, list_fields

app = Flask(__name__)


def _save_upload(upload, directory: str, default_name: str) -> str:
    safe_name = Path(upload.filename or "").name or default_name
    dest = os.path.join(directory, safe_name)
    upload.save(dest)
    return dest


def _values_from_form(form) -> dict:
    """Parse the ``values`` form field (a JSON object)."""
    raw = (form.get("values") or "").strip()
    if not raw:
        return {}
    values = json.loads(raw)
    if not isinstance(values, dict):
        raise ValueError("values must be a JSON object of field names to values")
    return values


@app.route("/")
def index():
    """Serve the single-page UI."""
    return render_template_string(INDEX_HTML)


@app.route("/fill", methods=["POST"])
def fill():
    """Fill the uploaded PDF with the posted values; return the filled PDF."""
    upload = request.files.get("pdf")
    if not upload or not upload.filename:
        return jsonify({"error": "Upload a fillable PDF as 'pdf'."}), 400

    try:
        values = _values_from_form(request.form)
    except ValueError as e:
        return jsonify({"error": f"Invalid values: {e}"}), 400

    work_dir = tempfile.mkdtemp()
    try:
        config = None
        config_file = request.files.get("config_file")
        if config_file and config_file.filename:
            config_path = _save_upload(config_file, work_dir, "config.yaml")
            config = load_config(config_path)
            if config is None:
                return jsonify({"error": "Failed to load config from uploaded YAML."}), 400

        template_path = _save_upload(upload, work_dir, "template.pdf")
        output_path = os.path.join(work_dir, "filled.pdf")
        report = fill_form(template_path, output_path, values, config or FillerConfig())

        with open(output_path, "rb") as f:
            data = f.read()
        response = Response(data, mimetype="application/pdf")
        response.headers["Content-Disposition"] = "attachment; filename=filled.pdf"
        response.headers["X-Fields-Filled"] = str(len(report.filled))
        response.headers["X-Fields-Unmatched"] = ",".join(report.unmatched)
        return response

    except FormNotFoundError as e:
        return jsonify({"error": str(e)}), 400
    except FormFillerError as e:
        return jsonify({"error": str(e)}), 422
    except Exception as e:
        return jsonify({"error": str(e)}), 500
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)


@app.route("/fields", methods=["POST"])
def fields():
    """List the fields of the uploaded PDF as JSON."""
    upload = request.files.get("pdf")
    if not upload or not upload.filename:
        return jsonify({"error": "Upload a PDF as 'pdf'."}), 400

    work_dir = tempfile.mkdtemp()
    try:
        path = _save_upload(upload, work_dir, "template.pdf")
        found = list_fields(path)
        return jsonify({"fields": [
            {"name": info.name, "kind": info.kind, "flags": info.flags, "value": info.value}
            for info in found
        ]})
    except FormNotFoundError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return jsonify({"error": str(e)}), 500
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>PDF Forms Filler</title>
<style>
  body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; max-width: 760px; margin: 2rem auto; color: #222; }
  h1 { font-size: 1.5rem; }
  label { display: block; margin-top: 1rem; font-weight: 600; }
  textarea { width: 100%; height: 12rem; font-family: monospace; }
  button { margin-top: 1rem; padding: .5rem 1.2rem; }
  #message { color: #b00020; margin-top: 1rem; }
  table { border-collapse: collapse; margin-top: 1rem; width: 100%; }
  td, th { border: 1px solid #ddd; padding: .3rem .5rem; text-align: left; font-size: .9rem; }
</style>
</head>
<body>
<h1>PDF Forms Filler</h1>
<form id="fill-form">
  <label for="pdf">Fillable PDF</label>
  <input type="file" id="pdf" name="pdf" accept="application/pdf">
  <label for="values">Values (JSON, qualified field name to value)</label>
  <textarea id="values" name="values">{}</textarea>
  <label for="config_file">Config (optional YAML)</label>
  <input type="file" id="config_file" name="config_file" accept=".yaml,.yml">
  <div>
    <button type="button" id="btn-fields">List fields</button>
    <button type="submit">Fill PDF</button>
  </div>
</form>
<div id="message"></div>
<table id="fields"></table>
<script>
  var form = document.getElementById('fill-form');
  var message = document.getElementById('message');
  var table = document.getElementById('fields');

  document.getElementById('btn-fields').addEventListener('click', async function () {
    message.textContent = '';
    table.innerHTML = '';
    var body = new FormData();
    body.append('pdf', document.getElementById('pdf').files[0]);
    var r = await fetch('/fields', { method: 'POST', body: body });
    var data = await r.json();
    if (!r.ok) { message.textContent = data.error || r.statusText; return; }
    table.innerHTML = '<tr><th>Name</th><th>Type</th><th>Value</th></tr>';
    data.fields.forEach(function (f) {
      var row = table.insertRow();
      row.insertCell().textContent = f.name;
      row.insertCell().textContent = f.kind;
      row.insertCell().textContent = f.value === null ? '' : f.value;
    });
  });

  form.addEventListener('submit', async function (e) {
    e.preventDefault();
    message.textContent = '';
    var r = await fetch('/fill', { method: 'POST', body: new FormData(form) });
    if (!r.ok) {
      var data = await r.json();
      message.textContent = data.error || r.statusText;
      return;
    }
    var blob = await r.blob();
    var link = document.createElement('a');
    link.href = URL.createObjectURL(blob);
    link.download = 'filled.pdf';
    link.click();
  });
</script>
</body>
</html>
"""


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
