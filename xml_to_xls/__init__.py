"""XML to Excel Converter Backend Package.

This package converts arbitrary, possibly malformed XML documents into
multi-sheet Excel workbooks. It includes:
- Heuristic XML repair and tolerant, multi-strategy parsing
- Splitting of repeated elements into separate sheets of flattened rows
- An upload endpoint with guaranteed cleanup of staged files
- Structured audit logging
"""

__version__ = "1.0.0"
__license__ = "MIT"
