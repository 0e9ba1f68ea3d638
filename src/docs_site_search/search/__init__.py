"""
Search indexing and query engine package.

This package provides a pure-Python search stack for static docs sites:
- tokenizer: ASCII word runs plus one term per CJK character
- extractor: HTML and Markdown pages to search documents
- index_builder: Postings, document frequencies and corpus stats
- storage: JSON serialization and the on-disk index file
- bm25_engine: Field-boosted BM25 ranking with prefix matching
- loader: Lazily loaded, single-flighted index handle
"""
