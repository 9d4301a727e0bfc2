"""USB package installer client (Tinfoil protocol)

The package is split the same way the wire protocol is:
- frame layouts and their codecs
- the manifest announced at session start
- the command dispatch loop and the range streamer it drives
- the USB transport and the CLI around it

The peer drives the session; this side only answers.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
