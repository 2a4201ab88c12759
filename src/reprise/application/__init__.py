# Application Package
