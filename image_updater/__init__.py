"""Disk image updater.

Copies a user application into the /sbin directory of a FAT disk image:
- Loopback mount when the environment allows it
- Offline FAT editing through mtools otherwise
- Every external tool behind a narrow, fakeable interface
"""

__all__ = []
