from flask import Flask, request, jsonify, redirect, url_for
import sys
from dataclasses import asdict
from pathlib import Path

# Ensure repository root is on sys.path for package import
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from empd.config import load_building
from empd.diagnostics import EMPDInputError
from empd.logging_config import setup_logging
from empd.materials import load_empd_settings
from empd.report import report
from empd.simulation import run_simulation, steps_from_dict

app = Flask(__name__)

EXAMPLE = {
    'materials': [{'name': 'Gypsum', 'thickness': 0.0127, 'conductivity': 0.16, 'density': 800, 'specific_heat': 1090}],
    'constructions': [{'name': 'Interior Wall', 'layers': ['Gypsum']}],
    'zones': ['Zone 1'],
    'surfaces': [{'name': 'Wall 1', 'zone': 'Zone 1', 'construction': 'Interior Wall'}],
    'empd_settings': [{
        'material': 'Gypsum', 'mu': 8.0, 'a': 0.02, 'b': 1.0, 'c': 0.01, 'd': 2.0,
        'surface_depth': 0.005, 'deep_depth': 0.0, 'coating_thickness': 0.0, 'mu_coating': 0.0,
    }],
    'simulation': {'timesteps_per_hour': 4},
    'steps': [
        {'zones': {'Zone 1': {'temperature': 22.0, 'humidity_ratio': 0.012}},
         'surface_temperatures': {'Wall 1': 21.0}},
        {'zones': {'Zone 1': {'temperature': 22.0, 'humidity_ratio': 0.010}},
         'surface_temperatures': {'Wall 1': 21.0}, 'repeat': 96},
    ],
}


def _usage():
    return jsonify({
        'ok': True,
        'usage': 'POST JSON to /simulate (results) or /report (HTML) with {materials, constructions, zones, surfaces, empd_settings, simulation, steps}; GET /empd_settings?q= lists stored EMPD settings',
        'example': EXAMPLE,
    })


def _run(data: dict) -> dict:
    building, settings, config = load_building(data)
    steps = steps_from_dict(data.get('steps', []))
    return run_simulation(building, settings, steps, config)


@app.route('/', methods=['GET'])
def index():
    return _usage()


@app.route('/simulate', methods=['GET', 'POST'])
def simulate_api():
    # Simple help on GET to avoid 405 if user navigates directly
    if request.method == 'GET':
        return _usage()
    try:
        data = request.get_json(force=True)
        if not isinstance(data, dict):
            return jsonify({'ok': False, 'error': 'Expected a JSON object'}), 400
        result = _run(data)
        return jsonify({'ok': True, 'result': result})
    except EMPDInputError as e:
        return jsonify({'ok': False, 'error': str(e), 'diagnostics': [line for d in e.diagnostics for line in d.lines()]}), 400
    except (ValueError, KeyError, FileNotFoundError) as e:
        return jsonify({'ok': False, 'error': f'Invalid input: {e}'}), 400


@app.route('/report', methods=['POST'])
def report_api():
    try:
        data = request.get_json(force=True)
        result = _run(data)
    except (EMPDInputError, ValueError, KeyError, FileNotFoundError) as e:
        return jsonify({'ok': False, 'error': str(e)}), 400
    return report(result), 200, {'Content-Type': 'text/html; charset=utf-8'}


@app.route('/empd_settings', methods=['GET'])
def empd_settings_api():
    settings = load_empd_settings()
    q = request.args.get('q')
    if q:
        ql = q.lower()
        settings = [s for s in settings if ql in s.material_name.lower()]
    return jsonify({'ok': True, 'empd_settings': [asdict(s) for s in settings]})


@app.errorhandler(405)
def handle_405(e):
    # If someone POSTs to '/', redirect to the usage page
    if request.path == '/':
        return redirect(url_for('index'), code=303)
    return jsonify({'ok': False, 'error': 'Method Not Allowed', 'hint': 'GET / for usage, POST JSON to /simulate'}), 405


if __name__ == '__main__':
    setup_logging('DEBUG')
    app.run(debug=True)
