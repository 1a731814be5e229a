"""Write-probe monitor for NFS/CIFS network mounts."""

__version__ = "1.0.0"
