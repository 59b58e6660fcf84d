"""
Refactorer CLI package.

This package provides a command-line interface (CLI) that applies one
natural-language instruction to a batch of files through the OpenAI
Chat Completions API.  For every file matched by a glob pattern it:

* Reads the current contents.
* Builds a prompt that keeps the instruction and the file apart.
* Requests a completion and extracts the rewritten file from the reply.
* Overwrites the file with the rewritten contents.

Each file is handled independently, so one failure never stops the rest
of the batch.  See `cli.py` for the entry point.
"""

__all__ = [
    "cli",
]
