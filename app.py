from flask import Flask, request, jsonify
from flask_cors import CORS
import threading, os, json, time, logging

from solver import solve_cryptarithm, normalize_puzzle, configure_logging, PuzzleError, MAX_WORKERS

LOGGER = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# Path to trace file
TRACE_PATH = os.environ.get(
    "CRYPTARITHM_TRACE_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "trace.json"),
)


# --------------------------------------------------
# Utility: Run solver in a background thread
# --------------------------------------------------
def remove_trace():
    """Delete the trace file, retrying while another reader holds it."""
    if not os.path.exists(TRACE_PATH):
        return True
    for _ in range(5):  # retry up to 5 times
        try:
            os.remove(TRACE_PATH)
            return True
        except FileNotFoundError:
            return True
        except PermissionError:
            # File might still be used by another process (like a previous fetch)
            time.sleep(0.3)
    LOGGER.warning("Couldn't remove old trace %s", TRACE_PATH)
    return False


def run_solver(words, result, options):
    """
    Runs solver in a thread, writes trace.json as it goes.
    """
    remove_trace()
    try:
        solve_cryptarithm(words, result, trace_path=TRACE_PATH, **options)
    except Exception:
        LOGGER.exception("Solver error for %s = %s", words, result)


def read_trace():
    with open(TRACE_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def _options(data):
    presets = data.get("presets") or None
    if presets is not None and not isinstance(presets, dict):
        raise PuzzleError("presets must be an object of letter: digit")
    workers = data.get("workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or not 1 <= workers <= MAX_WORKERS:
        raise PuzzleError(f"workers must be an integer from 1 to {MAX_WORKERS}")
    for flag in ("allow_leading_zero", "case_sensitive"):
        if flag in data and not isinstance(data[flag], bool):
            raise PuzzleError(f"{flag} must be true or false")
    return {
        "presets": presets,
        "allow_leading_zero": data.get("allow_leading_zero", True),
        "case_sensitive": data.get("case_sensitive", False),
        "workers": workers,
    }


# --------------------------------------------------
# Routes
# --------------------------------------------------
@app.route("/solve", methods=["POST"])
def solve():
    """
    Starts solving (non-blocking thread).

    Expected JSON:
    {
      "words": ["SEND", "MORE"],
      "result": "MONEY",
      "allow_leading_zero": true/false,
      "case_sensitive": true/false,
      "presets": {"M": 1},
      "workers": 1
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "expected a JSON object"}), 400

    try:
        options = _options(data)
        words, result = normalize_puzzle(
            data.get("words", []), data.get("result", ""), options["case_sensitive"]
        )
    except PuzzleError as e:
        return jsonify({"error": str(e)}), 400

    # Start background solver thread
    t = threading.Thread(target=run_solver, args=(words, result, options), daemon=True)
    t.start()

    return jsonify({"status": "started", "words": words, "result": result,
                    "allow_leading_zero": options["allow_leading_zero"]})


@app.route("/trace", methods=["GET"])
def trace():
    """
    Returns JSON:
    {
      "ready": true/false,
      "events": [...]
    }
    """
    if not os.path.exists(TRACE_PATH):
        return jsonify({"ready": False, "events": []})

    try:
        events = read_trace()
    except json.JSONDecodeError:
        # the solver may be halfway through rewriting the file
        time.sleep(0.5)
        try:
            events = read_trace()
        except (OSError, json.JSONDecodeError):
            return jsonify({"ready": False, "events": []})

    # Only report ready when solver has fully completed
    ready = bool(events) and events[-1].get("type") == "SOLVER_DONE"
    return jsonify({"ready": ready, "events": events})


@app.route("/clear", methods=["POST"])
def clear():
    """Deletes trace.json to reset solver state."""
    return jsonify({"cleared": remove_trace()})


# --------------------------------------------------
# Main entry point
# --------------------------------------------------
if __name__ == "__main__":
    configure_logging()
    print("Cryptarithm solver running at http://127.0.0.1:5000/")
    app.run(debug=True)
