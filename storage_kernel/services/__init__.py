"""Write-side services for the storage kernel."""
