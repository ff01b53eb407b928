"""Microsoft Graph drive access: auth, listing, chunked upload and download."""
