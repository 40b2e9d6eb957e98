#!/usr/bin/env python3
"""CueDeck - hot-cue deck controller for streaming video.
Unified launcher with automatic interface detection.

Usage:
    python run_cuedeck.py              Auto-detect best available interface
    python run_cuedeck.py --repl       Force REPL mode (always available)
    python run_cuedeck.py --gui        Force wxPython GUI
    python run_cuedeck.py --tui        Force Textual TUI
    python run_cuedeck.py --dual       Two crossfaded decks
    python run_cuedeck.py --player mpv Use mpv instead of the simulated player
    python run_cuedeck.py --help       Show this help
"""

import argparse
import logging
import os
import sys

# Ensure the project root is on the path
HERE = os.path.dirname(os.path.abspath(__file__))
if HERE not in sys.path:
    sys.path.insert(0, HERE)

logger = logging.getLogger("cuedeck")


# ── Dependency checks ──────────────────────────────────────────────────

def _check_core_deps():
    """Verify core dependencies are installed. Exit with helpful message if not."""
    missing = []
    for pkg, import_name in [
        ("numpy", "numpy"),
    ]:
        try:
            __import__(import_name)
        except ImportError:
            missing.append(pkg)
    if missing:
        print("CueDeck: Missing core dependencies:")
        for pkg in missing:
            print(f"  - {pkg}")
        print(f"\nInstall with:  pip install {' '.join(missing)}")
        sys.exit(1)


def _has_wx():
    """Check if wxPython is available."""
    try:
        import wx  # noqa: F401
        return True
    except ImportError:
        return False


def _has_textual():
    """Check if Textual is available."""
    try:
        import textual  # noqa: F401
        return True
    except ImportError:
        return False


def _configure_logging(prefs, verbose=False):
    level_name = "DEBUG" if verbose else str(prefs.get("log_level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _make_session(args, prefs):
    from cuedeck.core.session import Session

    if args.player:
        prefs["player"] = args.player
    if args.profile:
        prefs["profile_id"] = args.profile
    variant = "dual" if args.dual else ("single" if args.single else None)
    return Session(variant=variant, prefs=prefs)


# ── Launchers ──────────────────────────────────────────────────────────

def launch_repl(session):
    """Launch the REPL (bcuedeck.py)."""
    print("CueDeck: Starting REPL...")
    import bcuedeck
    bcuedeck.main(session)


def launch_gui(session):
    """Launch the wxPython GUI (gui.shell)."""
    if not _has_wx():
        print("CueDeck: wxPython is not installed.")
        print("Install with:  pip install wxPython")
        print("\nFalling back to REPL...")
        launch_repl(session)
        return
    print("CueDeck: Starting GUI...")
    from gui.shell import launch_shell
    launch_shell(session)


def launch_tui(session):
    """Launch the Textual TUI (cuedeck_tui.py)."""
    if not _has_textual():
        print("CueDeck: Textual is not installed.")
        print("Install with:  pip install textual")
        print("\nFalling back to REPL...")
        launch_repl(session)
        return
    print("CueDeck: Starting TUI...")
    import cuedeck_tui
    cuedeck_tui.CueDeckTUI(session).run()


def auto_detect(session):
    """Pick the best available interface automatically.

    Priority: GUI > TUI > REPL
    GUI requires wxPython + a display server; it is the only interface
    with key-up events, so gate mode works there.
    """
    has_display = bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")
                       or os.name == "nt")

    if has_display and _has_wx():
        launch_gui(session)
    elif _has_textual():
        launch_tui(session)
    else:
        launch_repl(session)


# ── CLI ────────────────────────────────────────────────────────────────

def build_parser():
    parser = argparse.ArgumentParser(
        prog="cuedeck",
        description="CueDeck - hot-cue deck controller for streaming video",
        epilog=(
            "Interfaces:\n"
            "  REPL  Terminal command line (always available)\n"
            "  GUI   wxPython visual interface (pip install wxPython)\n"
            "  TUI   Textual terminal UI (pip install textual)\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--repl", action="store_true", help="Launch REPL (terminal)")
    group.add_argument("--gui", action="store_true", help="Launch wxPython GUI")
    group.add_argument("--tui", action="store_true", help="Launch Textual TUI")
    variant = parser.add_mutually_exclusive_group()
    variant.add_argument("--single", action="store_true", help="One deck, 10 slots x 30 keys")
    variant.add_argument("--dual", action="store_true", help="Two decks, 3 slots x 15 keys, crossfader")
    parser.add_argument("--player", choices=["simulated", "mpv"], help="Playback backend")
    parser.add_argument("--profile", help="Profile id for saved cues")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--check", action="store_true",
        help="Check dependencies and available interfaces, then exit",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # Always verify core deps first
    _check_core_deps()

    if args.check:
        _print_status()
        return

    from cuedeck.core.user_data import load_preferences
    prefs = load_preferences()
    _configure_logging(prefs, args.verbose)
    session = _make_session(args, prefs)

    if args.repl:
        launch_repl(session)
    elif args.gui:
        launch_gui(session)
    elif args.tui:
        launch_tui(session)
    else:
        auto_detect(session)


def main_tui():
    """Console-script entry point that always opens the TUI."""
    main(["--tui"] + sys.argv[1:])


def _print_status():
    """Print dependency and interface availability status."""
    from cuedeck import __version__
    from cuedeck.core.user_data import get_cuedeck_root

    print(f"CueDeck v{__version__}")
    print("=" * 40)
    print()

    print("Core dependencies:")
    for pkg, import_name in [
        ("numpy", "numpy"),
    ]:
        try:
            mod = __import__(import_name)
            ver = getattr(mod, "__version__", "installed")
            print(f"  {pkg:20s} {ver}")
        except ImportError:
            print(f"  {pkg:20s} NOT INSTALLED")

    print()
    print("Interfaces:")
    print(f"  {'REPL':20s} always available")

    if _has_wx():
        import wx
        print(f"  {'GUI (wxPython)':20s} {wx.__version__}")
    else:
        print(f"  {'GUI (wxPython)':20s} NOT INSTALLED  (pip install wxPython)")

    if _has_textual():
        import textual
        ver = getattr(textual, "__version__", "installed")
        print(f"  {'TUI (Textual)':20s} {ver}")
    else:
        print(f"  {'TUI (Textual)':20s} NOT INSTALLED  (pip install textual)")

    has_display = bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
    print()
    print(f"Display server: {'detected' if has_display else 'not detected (GUI unavailable)'}")

    print()
    print("Players:")
    print(f"  {'simulated':20s} always available")
    try:
        import yt_dlp
        ver = getattr(getattr(yt_dlp, "version", None), "__version__", "installed")
        print(f"  {'mpv (yt-dlp)':20s} {ver}")
    except ImportError:
        print(f"  {'mpv (yt-dlp)':20s} not installed  (pip install yt-dlp)")

    print()
    print(f"User data: {get_cuedeck_root()}")


if __name__ == "__main__":
    main()
