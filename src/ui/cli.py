import argparse

from utils.core import cmd_add, cmd_cat, cmd_init, cmd_log, cmd_ls, cmd_reconcile, cmd_serve


def _common(p: argparse.ArgumentParser) -> None:
    p.add_argument("repo", help="Path to the git working directory")
    p.add_argument("--passphrase", help="Store passphrase (default: $EGFS_PASSPHRASE)")
    p.add_argument("--remote", help="Remote to push to (empty string disables pushing)")
    p.add_argument("--branch", help="Name of the index branch")
    p.add_argument("--config", help="Path to egfs.conf")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Encrypted document store on git branches")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Initialize repository and empty index")
    _common(p_init)
    p_init.set_defaults(func=cmd_init)

    p_add = sub.add_parser("add", help="Append an entry to a document")
    _common(p_add)
    p_add.add_argument("name", help="Document name")
    p_add.add_argument("path", nargs="?", help="File with the entry content ('-' for stdin)")
    p_add.add_argument("--text", help="Entry content given inline")
    p_add.set_defaults(func=cmd_add)

    p_ls = sub.add_parser("ls", help="List documents")
    _common(p_ls)
    p_ls.set_defaults(func=cmd_ls)

    p_cat = sub.add_parser("cat", help="Decrypt a document")
    _common(p_cat)
    p_cat.add_argument("name", help="Document name")
    p_cat.add_argument("--out", help="Output plaintext path (default: stdout)")
    p_cat.set_defaults(func=cmd_cat)

    p_log = sub.add_parser("log", help="List the entries of a document")
    _common(p_log)
    p_log.add_argument("name", help="Document name")
    p_log.set_defaults(func=cmd_log)

    p_rec = sub.add_parser("reconcile", help="Restore documents missing from the index")
    _common(p_rec)
    p_rec.set_defaults(func=cmd_reconcile)

    p_srv = sub.add_parser("serve", help="Serve documents read-only over HTTP")
    _common(p_srv)
    p_srv.add_argument("--host", help="Bind address")
    p_srv.add_argument("--port", type=int, help="Port")
    p_srv.set_defaults(func=cmd_serve)

    return p
