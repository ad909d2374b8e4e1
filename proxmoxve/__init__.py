"""Proxmox VE QEMU configuration values, VM request bodies and read-only data sources."""

__version__ = "0.12.0"