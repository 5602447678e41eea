"""Module Wrapper.

This module rewrites Emscripten glue into a single factory function:

    module.exports = function (bindings) { ... return Promise<Module>; }

Calling the factory runs the glue, waits for the runtime to finish its
one-time initialization, then:
    - adds an unprefixed alias for every "_"-prefixed export (_add -> add)
    - copies every key of the bindings record onto the module object
and resolves to that same module object.

Two glue styles are handled:
    - modularized: the glue defines its own factory (MODULARIZE=1). Trailing
      export statements are stripped and the embedded factory is invoked.
    - callback: the glue signals readiness through
      Module.onRuntimeInitialized. The wrapper pre-declares Module with that
      callback and bridges it into a Promise.

Both styles end in the same finalize helper, so callers see one contract.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

DEFAULT_INJECTION_POINT = "bindings"
DEFAULT_FACTORY_NAME = "Module"

STYLE_MODULARIZED = "modularized"
STYLE_CALLBACK = "callback"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

# `})();` or `}());` at the very end of the glue
_IIFE_TAIL_RE = re.compile(r"\}\s*\)\s*\(\s*\)\s*;?\s*\Z|\}\s*\(\s*\)\s*\)\s*;?\s*\Z")

# `if (typeof exports === 'object' && typeof module === 'object') ...`
_EXPORT_GUARD_RE = re.compile(
    r"^[ \t]*if\s*\(\s*typeof\s+exports\s*===?\s*['\"]object['\"]", re.MULTILINE
)

_TRAILING_EXPORT_RE = re.compile(
    r"^[ \t]*(?:export\s+default\s+(?P<esm>[A-Za-z_$][\w$]*)"
    r"|module\.exports\s*=\s*(?P<cjs>[A-Za-z_$][\w$]*))\s*;?\s*\Z",
    re.MULTILINE,
)

_FACTORY_VAR_RE = re.compile(r"^[ \t]*var\s+([A-Za-z_$][\w$]*)\s*=\s*\(", re.MULTILINE)

# Comment-only or lone ";" lines at the end of the glue
_TRAILING_NOISE_RE = re.compile(r"(?:^[ \t]*(?://[^\n]*|;)[ \t]*\n?)+\Z", re.MULTILINE)


class ModuleWrapperError(Exception):
    """Raised when glue text cannot be wrapped."""
    pass


@dataclass(frozen=True)
class GlueAnalysis:
    """How a piece of glue text will be driven."""
    style: str
    body: str
    factory_name: str = DEFAULT_FACTORY_NAME


_FINALIZE_HELPER = """\
    function __emloaderFinalize(instance, bindings) {
        Object.keys(instance).forEach(function (key) {
            if (key.length > 1 && key.charAt(0) === "_") {
                instance[key.substring(1)] = instance[key];
            }
        });
        Object.keys(bindings || {}).forEach(function (key) {
            instance[key] = bindings[key];
        });
        return instance;
    }
"""


def _strip_trailing_noise(text: str) -> str:
    text = text.rstrip()
    while True:
        match = _TRAILING_NOISE_RE.search(text)
        if match is None or match.start() == len(text):
            return text
        text = text[:match.start()].rstrip()


def strip_export_statements(text: str):
    """Remove trailing CommonJS/AMD/ES export statements.

    Returns:
        (stripped_text, exported_name); exported_name is None when no
        export statement naming a binding was found
    """
    stripped = _strip_trailing_noise(text)
    exported_name: Optional[str] = None

    guards = list(_EXPORT_GUARD_RE.finditer(stripped))
    if guards:
        tail = stripped[guards[-1].start():]
        if "module.exports" in tail or "define(" in tail:
            match = re.search(r"module\.exports\s*=\s*([A-Za-z_$][\w$]*)", tail)
            if match:
                exported_name = match.group(1)
            stripped = _strip_trailing_noise(stripped[:guards[-1].start()])

    while True:
        match = _TRAILING_EXPORT_RE.search(stripped)
        if match is None:
            break
        exported_name = exported_name or match.group("esm") or match.group("cjs")
        stripped = _strip_trailing_noise(stripped[:match.start()])

    return stripped, exported_name


def detect_glue_style(text: str) -> GlueAnalysis:
    """Decide whether glue is modularized or callback style.

    Args:
        text: Generated glue text

    Returns:
        GlueAnalysis with the body to embed and the factory name
    """
    stripped, exported_name = strip_export_statements(text)

    if _IIFE_TAIL_RE.search(stripped):
        if exported_name:
            factory_name = exported_name
        else:
            match = _FACTORY_VAR_RE.search(stripped)
            factory_name = match.group(1) if match else DEFAULT_FACTORY_NAME
        return GlueAnalysis(STYLE_MODULARIZED, stripped, factory_name)

    # Newer emitters declare the factory as a plain (async) function
    if exported_name and re.search(
        r"^[ \t]*(?:async\s+)?function\s+" + re.escape(exported_name) + r"\s*\(",
        stripped,
        re.MULTILINE,
    ):
        return GlueAnalysis(STYLE_MODULARIZED, stripped, exported_name)

    return GlueAnalysis(STYLE_CALLBACK, text.rstrip())


class ModuleWrapper:
    """Wraps Emscripten glue into a promise-returning factory."""

    def __init__(self, es_module: bool = False):
        """Initialize wrapper.

        Args:
            es_module: Emit `export default function` instead of
                `module.exports = function`
        """
        self.es_module = es_module

    def wrap(self, generated_text: str, injection_point: str = DEFAULT_INJECTION_POINT) -> str:
        """Wrap glue text.

        Args:
            generated_text: Glue produced by emcc/em++
            injection_point: Name of the factory's bindings parameter

        Returns:
            JavaScript source of the wrapped module

        Raises:
            ModuleWrapperError: On empty glue or an invalid parameter name
        """
        if not generated_text or not generated_text.strip():
            raise ModuleWrapperError("Generated glue is empty")
        if not _IDENTIFIER_RE.match(injection_point) or injection_point.startswith("__emloader"):
            raise ModuleWrapperError(f"Invalid injection point name: {injection_point!r}")

        analysis = detect_glue_style(generated_text)
        if analysis.style == STYLE_MODULARIZED:
            body = self._modularized_body(analysis, injection_point)
        else:
            body = self._callback_body(analysis, injection_point)

        header = "export default function" if self.es_module else "module.exports = function"
        lines: List[str] = [f"{header} ({injection_point}) {{", _FINALIZE_HELPER]
        lines.extend(body)
        lines.append("}" if self.es_module else "};")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _modularized_body(analysis: GlueAnalysis, injection_point: str) -> List[str]:
        name = analysis.factory_name
        return [
            analysis.body,
            "",
            f"    var __emloaderInstance = {name}();",
            "    var __emloaderReady = (__emloaderInstance && __emloaderInstance.ready)",
            "        ? __emloaderInstance.ready",
            "        : __emloaderInstance;",
            "    return Promise.resolve(__emloaderReady).then(function (instance) {",
            f"        return __emloaderFinalize(instance, {injection_point});",
            "    });",
        ]

    @staticmethod
    def _callback_body(analysis: GlueAnalysis, injection_point: str) -> List[str]:
        return [
            "    var __emloaderResolve;",
            "    var __emloaderReady = new Promise(function (resolve) {",
            "        __emloaderResolve = resolve;",
            "    });",
            "    function __emloaderOnInit() {",
            "        __emloaderResolve(Module);",
            "    }",
            "    var Module = { onRuntimeInitialized: __emloaderOnInit };",
            "",
            analysis.body,
            "",
            # Glue (or its --post-js) may install its own callback
            "    if (Module.onRuntimeInitialized !== __emloaderOnInit) {",
            "        var __emloaderUserInit = Module.onRuntimeInitialized;",
            "        Module.onRuntimeInitialized = function () {",
            "            if (typeof __emloaderUserInit === \"function\") {",
            "                __emloaderUserInit.apply(this, arguments);",
            "            }",
            "            __emloaderOnInit();",
            "        };",
            "    }",
            "    return __emloaderReady.then(function (instance) {",
            f"        return __emloaderFinalize(instance, {injection_point});",
            "    });",
        ]
