import argparse
import os
import sys

from pathlib import Path

from storage.fs import EncryptedFileSystem
from storage.store import DocumentStore
from utils.config import PASSPHRASE_ENV, Settings, load_settings
from utils.errors import EgfsError
from utils.helper import rel_time_iso


def resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(Path(args.config) if getattr(args, "config", None) else None)
    if getattr(args, "remote", None) is not None:
        settings.remote = args.remote
    if getattr(args, "branch", None):
        settings.primary_branch = args.branch
    return settings


def open_store(args: argparse.Namespace) -> DocumentStore:
    passphrase = args.passphrase or os.environ.get(PASSPHRASE_ENV)
    if not passphrase:
        print(f"[!] No passphrase given (use --passphrase or {PASSPHRASE_ENV})")
        sys.exit(1)
    return DocumentStore.open(Path(args.repo), passphrase, resolve_settings(args))


def cmd_init(args: argparse.Namespace) -> None:
    store = open_store(args)
    if store.init():
        print(f"[+] Initialized store at {args.repo}")
    else:
        print(f"[+] Store at {args.repo} already initialized")


def cmd_add(args: argparse.Namespace) -> None:
    if args.text is not None:
        content = args.text.encode("utf-8")
    elif args.path == "-":
        content = sys.stdin.buffer.read()
    elif args.path:
        src = Path(args.path)
        if not src.is_file():
            print(f"[!] Not a file: {src}")
            sys.exit(1)
        content = src.read_bytes()
    else:
        print("[!] Nothing to add: give a path, '-' for stdin, or --text")
        sys.exit(1)

    store = open_store(args)
    entry = store.write(args.name, content)
    print(f"[+] Appended {len(content)} bytes to {args.name} at {rel_time_iso(entry.timestamp)}")


def cmd_ls(args: argparse.Namespace) -> None:
    fs = EncryptedFileSystem(open_store(args))
    files = fs.list_all()
    if not files:
        print("(empty)")
        return
    for f in files:
        st = f.stat()
        f.close()
        print(f"{st.name}\t{st.size} bytes\t{rel_time_iso(st.mod_time)}")


def cmd_cat(args: argparse.Namespace) -> None:
    fs = EncryptedFileSystem(open_store(args))
    with fs.open(args.name) as f:
        data = f.read()
    if args.out:
        Path(args.out).write_bytes(data)
        print(f"[+] Extracted {args.name} -> {args.out}")
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


def cmd_log(args: argparse.Namespace) -> None:
    store = open_store(args)
    for entry in store.entries(args.name):
        print(f"{rel_time_iso(entry.timestamp)}\t{len(entry.content)} bytes")


def cmd_reconcile(args: argparse.Namespace) -> None:
    report = open_store(args).reconcile()
    for name in report.added:
        print(f"[+] Restored {name} to the index")
    for name in report.dangling:
        print(f"[!] Index lists {name} but its branch is missing")
    for branch in report.unnamed:
        print(f"[!] Branch {branch} has no readable name marker")
    if not (report.added or report.dangling or report.unnamed):
        print("[+] Index is consistent")


def cmd_serve(args: argparse.Namespace) -> None:
    from ui.server import serve

    store = open_store(args)
    host = args.host or store.settings.host
    port = args.port or store.settings.port
    serve(EncryptedFileSystem(store), host, port)


def run(args: argparse.Namespace) -> None:
    try:
        args.func(args)
    except EgfsError as e:
        print(f"[!] {type(e).__name__}: {e}")
        sys.exit(1)
