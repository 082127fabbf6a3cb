# solver.py
# Brute-force cryptarithm solver.
# - Normalizes input to uppercase (unless case_sensitive=True)
# - Pairs permutations of the digits 0-9 with the puzzle letters in first-seen order
# - Optional presets, leading-zero rule and threaded search
# - Writes trace.json (list of events) for visualization when trace_path is given

import json
import logging
import threading
from itertools import permutations

LOGGER = logging.getLogger(__name__)

DIGITS = tuple(range(10))
PROGRESS_EVERY = 100000
# one worker per possible digit of the first free letter
MAX_WORKERS = len(DIGITS)


class PuzzleError(ValueError):
    """Raised when the words or the result cannot form a puzzle."""


def configure_logging(level=logging.INFO):
    """Configure root logging with the project's formatter."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    ))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


# ---------- Trace utilities ----------
class TraceWriter:
    def __init__(self, path="trace.json"):
        self.path = path
        self.events = []
        self._lock = threading.Lock()
        self._write_now()  # create/overwrite file

    def _write_now(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.events, f, indent=2)

    def add(self, ev):
        with self._lock:
            self.events.append(ev)
            # write after every event so front-end can poll/update
            self._write_now()


class _NullTrace:
    def add(self, ev):
        pass


# ---------- Encoder ----------
def word_value(word, mapping):
    """Read word as a base-10 numeral, substituting each letter's digit."""
    number = 0
    for ch in word:
        number = number * 10 + mapping[ch]
    return number


def is_valid_solution(words, result, mapping):
    """Return True iff the addends sum to the result under mapping."""
    return sum(word_value(w, mapping) for w in words) == word_value(result, mapping)


# ---------- Puzzle preparation ----------
def _normalize_word(word, case_sensitive):
    if not isinstance(word, str):
        raise PuzzleError(f"expected a word, got {word!r}")
    word = word.strip()
    if not word:
        raise PuzzleError("words must not be empty")
    if not word.isalpha():
        raise PuzzleError(f"word {word!r} contains non-letter characters")
    if case_sensitive:
        return word
    upper = word.upper()
    # some letters expand when uppercased, e.g. "\u00df" -> "SS"
    if len(upper) != len(word):
        raise PuzzleError(f"word {word!r} changes length when uppercased")
    return upper


def normalize_puzzle(words, result, case_sensitive=False):
    """
    Validate and normalize a puzzle.
    words: sequence of addend words, e.g. ["SEND", "MORE"]
    result: result word, e.g. "MONEY"
    Returns (list of words, result). Raises PuzzleError on malformed input.
    """
    if isinstance(words, str) or not words:
        raise PuzzleError("at least one addend word is required")
    words = [_normalize_word(w, case_sensitive) for w in words]
    result = _normalize_word(result, case_sensitive)
    return words, result


def extract_letters(words, result):
    """Distinct letters across addends and result, in order of first appearance."""
    letters = []
    for w in list(words) + [result]:
        for ch in w:
            if ch not in letters:
                letters.append(ch)
    return letters


def leading_letters(words, result):
    return {w[0] for w in list(words) + [result] if len(w) > 1}


def _normalize_presets(presets, letters, case_sensitive):
    """Return presets keyed like the puzzle letters, or None if they cannot hold."""
    fixed = {}
    for k, val in presets.items():
        key = k if case_sensitive else str(k).upper()
        if key not in letters or isinstance(val, bool) or not isinstance(val, int):
            return None
        if val not in DIGITS:
            return None
        if key in fixed and fixed[key] != val:
            return None
        fixed[key] = val
    if len(set(fixed.values())) < len(fixed):
        return None
    return fixed


# ---------- Search ----------
class _Search:
    """Shared state of one solve: the puzzle, the stop flag and the answer."""

    def __init__(self, words, result, letters, fixed, forbid_zero, trace, progress_every):
        self.words = words
        self.result = result
        self.letters = letters
        self.fixed = fixed
        self.free = [ch for ch in letters if ch not in fixed]
        self.free_digits = [d for d in DIGITS if d not in fixed.values()]
        self.forbid_zero = forbid_zero
        self.trace = trace
        self.progress_every = progress_every
        self.found = threading.Event()
        self.solution = None
        self.checked = 0
        self._lock = threading.Lock()

    def candidates(self, first_digits=None):
        """Yield candidate mappings, optionally restricted on the first free letter."""
        free = self.free
        if not free:
            yield dict(self.fixed)
            return
        if first_digits is None:
            perms = permutations(self.free_digits, len(free))
        else:
            perms = (
                (d,) + rest
                for d in first_digits
                for rest in permutations([x for x in self.free_digits if x != d], len(free) - 1)
            )
        for perm in perms:
            mapping = dict(self.fixed)
            mapping.update(zip(free, perm))
            yield mapping

    def _count(self, n):
        with self._lock:
            before = self.checked
            self.checked += n
            if self.progress_every and before // self.progress_every != self.checked // self.progress_every:
                self.trace.add({"type": "PROGRESS", "checked": self.checked})

    def run(self, first_digits=None):
        checked = 0
        for mapping in self.candidates(first_digits):
            if self.found.is_set():
                break
            checked += 1
            if checked % 1000 == 0:
                self._count(1000)
            if any(mapping[ch] == 0 for ch in self.forbid_zero):
                continue
            if is_valid_solution(self.words, self.result, mapping):
                with self._lock:
                    if self.solution is None:
                        self.solution = {ch: mapping[ch] for ch in self.letters}
                self.found.set()
                break
        self._count(checked % 1000)

    def run_threaded(self, workers):
        # partition by the digit given to the first free letter
        workers = min(workers, len(self.free_digits))
        shares = [self.free_digits[i::workers] for i in range(workers)]
        threads = [
            threading.Thread(target=self.run, args=(share,), daemon=True)
            for share in shares if share
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()


# ---------- Main solver API ----------
def solve_cryptarithm(words, result, presets=None, allow_leading_zero=True,
                      case_sensitive=False, workers=1, trace_path=None,
                      progress_every=PROGRESS_EVERY):
    """
    words: list of addend words (strings), e.g. ["SEND", "MORE"]
    result: result word (string), e.g. "MONEY"
    presets: optional dict of fixed assignments {letter: digit}
    allow_leading_zero: when False, the first letter of a multi-letter word cannot be 0
    case_sensitive: when False, words are uppercased before solving
    workers: number of search threads; 1 searches in lexicographic permutation order
    trace_path: where to write trace.json, or None for no trace
    Returns: mapping letter->digit if solution found else None
    """
    words, result = normalize_puzzle(words, result, case_sensitive)
    trace = TraceWriter(trace_path) if trace_path else _NullTrace()
    trace.add({"type": "START", "words": words, "result": result,
               "allow_leading_zero": bool(allow_leading_zero), "workers": workers})
    LOGGER.info("Solving %s = %s", " + ".join(words), result)

    def finish(sol, reason, checked=0):
        trace.add({"type": "END", "result": sol, "reason": reason, "checked": checked})
        # Mark solver completion explicitly so /trace can detect it
        trace.add({"type": "SOLVER_DONE", "note": "Solver finished writing full trace."})
        LOGGER.info("Finished: %s after %d candidates", reason, checked)
        return sol

    letters = extract_letters(words, result)
    if len(letters) > len(DIGITS):
        # no injective mapping onto ten digits exists
        return finish(None, "too many letters")

    forbid_zero = set() if allow_leading_zero else leading_letters(words, result)

    fixed = {}
    if presets:
        fixed = _normalize_presets(presets, letters, case_sensitive)
        if fixed is None or any(fixed[ch] == 0 for ch in forbid_zero & set(fixed)):
            return finish(None, "inconsistent presets")
        trace.add({"type": "PRESETS", "assignment": dict(fixed)})

    search = _Search(words, result, letters, fixed, forbid_zero, trace, progress_every)
    if workers > 1 and len(search.free) > 0:
        search.run_threaded(workers)
    else:
        search.run()

    sol = search.solution
    return finish(sol, "solution found" if sol is not None else "no solution found", search.checked)
