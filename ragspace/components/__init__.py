"""Core Business Components.

This package contains independent modules:
- workspace: Workspace/document models, errors and metadata stores
- vectorstore: Per-workspace vector tables (in-memory, LanceDB)
- blobstore: Document file storage (in-memory, filesystem, S3)
- embeddings: Text embedding providers (mock, OpenAI)
"""
