"""Utils Package.

This package contains the conversion pipeline:
- XML repair and tolerant parsing
- Flattening and sheet splitting
- Excel workbook writing
- Structured audit logging
"""
