"""
Shared fixtures for build pipeline tests.

`fake_emcc` is an executable script standing in for emcc/em++. It records
its argv, prints diagnostics on both streams and writes the .js/.wasm (and
.data when --preload-file is given) next to the -o path. Behavior is steered
through environment variables:

    FAKE_EMCC_LOG        file receiving one JSON argv line per call
    FAKE_EMCC_EXIT       exit status to return without writing outputs
    FAKE_EMCC_SKIP_DATA  never write the .data file
"""

import stat
import sys

import pytest

CALLBACK_GLUE = (
    'var Module = typeof Module !== "undefined" ? Module : {};\n'
    'Module["_add"] = function (a, b) { return a + b; };\n'
    "setTimeout(function () { Module[\"onRuntimeInitialized\"](); }, 0);\n"
)

WASM_BYTES = b"\x00asm\x01\x00\x00\x00"

_SCRIPT = """import json
import os
import sys

GLUE = {glue!r}
WASM = {wasm!r}

args = sys.argv[1:]
log = os.environ.get("FAKE_EMCC_LOG")
if log:
    with open(log, "a") as f:
        f.write(json.dumps(args) + "\\n")

print("emcc: compiling " + args[0])
sys.stdout.flush()
sys.stderr.write("warning: fake diagnostic\\n")

code = int(os.environ.get("FAKE_EMCC_EXIT", "0"))
if code:
    sys.stderr.write("error: fake failure\\n")
    sys.exit(code)

out = args[args.index("-o") + 1]
base = out[:-3]
with open(out, "w") as f:
    f.write(GLUE)
with open(base + ".wasm", "wb") as f:
    f.write(WASM)
if "--preload-file" in args and not os.environ.get("FAKE_EMCC_SKIP_DATA"):
    with open(base + ".data", "wb") as f:
        f.write(b"preloaded")
"""


@pytest.fixture
def fake_emcc(tmp_path):
    """Create an executable fake Emscripten driver and return its path."""
    if sys.platform == "win32":
        pytest.skip("fake compiler relies on a shebang line")

    bin_dir = tmp_path / "fake-bin"
    bin_dir.mkdir()
    script = bin_dir / "emcc"
    script.write_text(
        f"#!{sys.executable}\n" + _SCRIPT.format(glue=CALLBACK_GLUE, wasm=WASM_BYTES)
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def emcc_log(tmp_path, monkeypatch):
    """Record fake compiler invocations; returns a reader for the calls."""
    import json

    log_path = tmp_path / "emcc-calls.jsonl"
    monkeypatch.setenv("FAKE_EMCC_LOG", str(log_path))
    monkeypatch.delenv("FAKE_EMCC_EXIT", raising=False)
    monkeypatch.delenv("FAKE_EMCC_SKIP_DATA", raising=False)

    def calls():
        if not log_path.exists():
            return []
        return [json.loads(line) for line in log_path.read_text().splitlines()]

    return calls


@pytest.fixture
def cpp_source(tmp_path):
    source = tmp_path / "src" / "example.cpp"
    source.parent.mkdir(parents=True, exist_ok=True)
    source.write_text('extern "C" int add(int a, int b) { return a + b; }\n')
    return source


@pytest.fixture
def c_source(tmp_path):
    source = tmp_path / "src" / "example.c"
    source.parent.mkdir(parents=True, exist_ok=True)
    source.write_text("int add(int a, int b) { return a + b; }\n")
    return source
