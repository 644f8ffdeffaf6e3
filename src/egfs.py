#!/usr/bin/env python3
"""
egfs: encrypted documents stored on git branches.

Every document lives on its own branch, named by the SHA-256 of the document
name. Each write appends one entry file to that branch; entry files are named
by a fixed-width encoding of their timestamp so they list in the order they
were written. The primary branch holds the encrypted table of contents.

Branch layout:
  <primary>                 # "master" by default
    file                    # hex(AES-256-GCM(JSON {name: true, ...}))
  <sha256(name)>
    name                    # hex(AES-256-GCM(document name))
    <entry id>              # hex(AES-256-GCM(entry content)), one per entry
    file                    # optional legacy single-file content

Entry id: hex of big-endian u64 (seconds + 2**63) || u32 nanoseconds.

Commands:
  init                 Initialize repository and empty index
  add <name> [path]    Append an entry (from path, stdin or --text)
  ls                   List documents
  cat <name>           Decrypt a document (legacy content + all entries)
  log <name>           List entries of a document
  reconcile            Restore documents whose index update was lost
  serve                Serve documents read-only over HTTP

Security choices:
  - AEAD: AES-256-GCM via cryptography.hazmat, nonce || ct || tag, hex encoded
  - Key = SHA-256(passphrase); unsalted, so equal passphrases give equal keys
"""
from __future__ import annotations
from ui.cli import build_parser
from utils.core import run
from utils.helper import setup_logging


def main():
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.debug)
    run(args)


if __name__ == "__main__":
    main()
