"""
Ingestion — PDF loading, chunking, and embedding into the vector store.

Each run walks the documents directory, extracts text from every PDF,
splits it into overlapping chunks, embeds them in batches and upserts
one record per chunk into the Chroma collection.
"""
