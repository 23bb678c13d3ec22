from __future__ import annotations

import os
import typing

from ._exceptions import TLSUnavailable
from .__version__ import __version__

try:
    import ssl
except ImportError:  # pragma: no cover
    ssl = None  # type: ignore[assignment]

if typing.TYPE_CHECKING:
    from ssl import SSLContext

    VerifyTypes = typing.Union[bool, str, "os.PathLike[str]", SSLContext]

USER_AGENT = f"minihttp/{__version__}"
READ_BUFFER_SIZE = 4096

# Interpreters built without OpenSSL have no ``ssl`` module.
TLS_AVAILABLE = ssl is not None


def create_ssl_context(verify: VerifyTypes = True) -> SSLContext:
    """Build the client-side ``SSLContext`` used for ``https`` URLs.

    ``verify`` may be ``True`` (system trust store, which also honours
    ``SSL_CERT_FILE`` / ``SSL_CERT_DIR``), ``False`` (no verification at all),
    a path to a CA bundle file or directory, or a ready ``SSLContext``.
    """
    if ssl is None:
        raise TLSUnavailable("TLS support is not available in this Python build")

    if isinstance(verify, ssl.SSLContext):
        return verify

    if verify is True:
        return ssl.create_default_context()

    if verify is False:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    path = os.fspath(verify)
    if os.path.isdir(path):
        return ssl.create_default_context(capath=path)
    return ssl.create_default_context(cafile=path)
