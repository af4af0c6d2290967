"""Core engine: object store, refs, staging, commit graph, working tree, merge, remotes."""
