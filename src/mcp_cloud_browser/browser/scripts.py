"""JavaScript snippets executed inside the remote page via ``execute_script``."""

# arguments[0]: caller-supplied source. Console methods are wrapped for the
# duration of the eval and restored in ``finally`` so a throwing script leaves
# the page's console untouched.
EVALUATE_WITH_CONSOLE_CAPTURE = r"""
const source = arguments[0];
const logs = [];
const methods = ['log', 'info', 'warn', 'error'];
const original = {};
methods.forEach(function (method) {
  original[method] = console[method];
  console[method] = function () {
    const args = Array.prototype.slice.call(arguments);
    logs.push('[' + method + '] ' + args.join(' '));
    return original[method].apply(console, args);
  };
});
try {
  const result = eval(source);
  return {result: result === undefined ? null : result, logs: logs};
} finally {
  methods.forEach(function (method) { console[method] = original[method]; });
}
"""

BODY_INNER_TEXT = "return document.body ? document.body.innerText : '';"

__all__ = [
    "EVALUATE_WITH_CONSOLE_CAPTURE",
    "BODY_INNER_TEXT",
]
