"""
Core Package.

Contains the segment injection engine:
- Go parsing into the Compilation Unit model
- Import resolution, declaration selection and statement building
- Injection and the output pipeline (printer, gofmt, goimports)
"""
