import re
import logging
logger = logging.getLogger(__name__)

_SCI_PATTERN = re.compile(r'\b\d+\.?\d*(e[+-]?\d+)\b', re.IGNORECASE)
_PLACEHOLDER_PATTERN = re.compile(r'<<__SCI_\d+__>>')


def _insert_multiplication(chunk):
    chunk = chunk.replace('^', '**')
    chunk = re.sub(r'(?<=\d)(?=[a-df-zA-DF-Z(])', '*', chunk)
    chunk = re.sub(r'(?<=[a-zA-Z])(?=\d)', '*', chunk)
    chunk = re.sub(r'(?<=[a-zA-Z])(?=[a-zA-Z])', '*', chunk)
    chunk = re.sub(r'(?<=\))(?=[a-zA-Z\d(])', '*', chunk)
    return chunk


def normalize_tf_string(tf_str: str) -> str:
    """
    Normalize a rational transfer-function string so sympy can parse it.

    Scientific literals (``1e-05``) are shielded first so they are not read as
    ``1*e - 5``; then explicit multiplication is inserted where juxtaposition
    implies it (``2z`` → ``2*z``, ``(z+1)(z-1)`` → ``(z+1)*(z-1)``) and ``^`` is
    turned into ``**``; finally the shielded literals are restored at full
    precision.

    Parameters
    ----------
    tf_str : str
        Raw expression, e.g. ``'0.5(z+1)^2/(z^2 - 0.2z)'``.

    Returns
    -------
    str
        An expression safe for ``sympy.parse_expr``.

    Examples
    --------
    >>> normalize_tf_string('2z^2 + 1e-3')
    '2*z**2 + 0.001'
    """
    protected = {}

    def protect(match):
        key = f"<<__SCI_{len(protected)}__>>"
        protected[key] = repr(float(match.group(0)))
        return key

    shielded = _SCI_PATTERN.sub(protect, tf_str)

    segments = []
    last = 0
    for match in _PLACEHOLDER_PATTERN.finditer(shielded):
        start, end = match.span()
        segments.append(_insert_multiplication(shielded[last:start]))
        segments.append(shielded[start:end])
        last = end
    segments.append(_insert_multiplication(shielded[last:]))
    normalized = ''.join(segments)

    for key, val in protected.items():
        normalized = normalized.replace(key, val)

    logger.debug(f"Normalized transfer function {tf_str!r} -> {normalized!r}")
    return normalized
