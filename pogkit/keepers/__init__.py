"""
**KEEPERS**

Storage of multiple partial order graphs keyed by label.
"""
