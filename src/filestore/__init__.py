"""
=============================================================================
FILESTORE - A directory exposed over hand-rolled HTTP/1.1
=============================================================================

Every URL path maps to a file under a fixed root directory, and the HTTP
method decides what happens to that file:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET     /notes.txt     read the file                               │
    │   HEAD    /notes.txt     does it exist? what type is it?             │
    │   PUT     /notes.txt     create or overwrite with the request body   │
    │   POST    /notes.txt     append the request body (text/plain only)   │
    │   DELETE  /notes.txt     remove the file                             │
    │   OPTIONS /notes.txt     which of the above are allowed here?        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The interesting part is the protocol engine: request framing, parsing and
response serialization are done by hand on raw socket bytes, with no
http.server or framework underneath.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    filestore/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m filestore)
    ├── server.py            # FileStoreServer: wiring + request cycle
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Failure taxonomy → status codes
    ├── access_log.py        # One line per request
    ├── core/                # Transport
    │   ├── socket_server.py # Listening socket, accept loop
    │   ├── connection.py    # Buffered reads for one request
    │   └── thread_pool.py   # Worker threads
    ├── http/                # Protocol
    │   ├── request.py       # Bytes → HTTPRequest
    │   ├── response.py      # HTTPResponse → bytes
    │   ├── status_codes.py  # The five emitted statuses
    │   ├── mime_types.py    # Extension → Content-Type
    │   └── error_page.py    # Decorative HTML error bodies
    ├── handlers/
    │   └── dispatcher.py    # Method → file operation
    └── storage/
        ├── paths.py         # URL path → path inside the root
        └── filesystem.py    # read / write / delete / stat

=============================================================================
QUICK START
=============================================================================

    $ python -m filestore --root ./public --port 3000

    $ curl -X PUT --data-binary "hello" localhost:3000/notes.txt
    File created or overwritten
    $ curl -X POST --data-binary " world" localhost:3000/notes.txt
    Data appended
    $ curl localhost:3000/notes.txt
    hello world

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileStoreServer, create_server
from .config import ServerConfig

__all__ = ["FileStoreServer", "ServerConfig", "create_server", "__version__"]
