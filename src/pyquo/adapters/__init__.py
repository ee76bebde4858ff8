"""Adapters implementing the outbound ports in :mod:`pyquo.ports`."""
