"""Bootstrap for the dominant-colours web service.

Installs Python dependencies, fetches the latest platform release of the
external binary, smoke-tests it and launches the web server.
"""

__version__ = "0.1.0"
