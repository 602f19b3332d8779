"""
Text index engine.

- schema: indexed field declarations and key layout
- analyzers: value -> index key tokenizer (prefix ladder / exact)
- reverse_map: per-record list of asserted index keys
- maintenance: diff-based index updates and deletions
- query: AND/OR evaluation with set intersections
- pagination: page windows and hydration through a finder
"""
