"""
Clipboard synchronization between a local editable buffer, the host
clipboard, and data arriving from a remote session.
"""
