"""
PkgScout - Package declaration discovery for PowerShell setup scripts.

Scans setup scripts for winget, Chocolatey, Scoop, Install-Module and
sideload declarations and produces a deduplicated package catalog.
"""

__version__ = "0.1.0"
