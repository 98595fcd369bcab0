"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                               │
    │  • Binds host:port, runs the accept() loop                          │
    │  • Wraps each client socket in a Connection                         │
    │  • SIGINT / SIGTERM → graceful shutdown                             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one Connection per client
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                      CONNECTION WORKERS                             │
    │  • A daemon thread per connection                                   │
    │  • A slow or silent client only blocks its own thread               │
    │  • join_all() on shutdown                                           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                 │
    │  • Buffers recv() chunks into one complete request                  │
    │  • AWAITING_REQUEST → DISPATCHING → RESPONDING → CLOSED              │
    │  • One response, then close                                         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .workers import ConnectionWorkers

__all__ = [
    "SocketServer",       # Accepts TCP connections
    "Connection",         # One client socket: read request, send response
    "ConnectionState",    # Lifecycle states
    "ConnectionWorkers",  # Thread per connection
]
