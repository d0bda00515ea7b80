"""Provider clients for Google Analytics, Search Console and Ahrefs."""
