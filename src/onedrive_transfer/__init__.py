"""List, download and upload OneDrive / SharePoint files via Microsoft Graph."""

__version__ = "0.1.0"
