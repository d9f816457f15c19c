from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import gomoq


def main() -> None:
    # Requirements:
    # - Go toolchain installed (go >= 1.22); set GOMOQ_GO to use a specific binary.
    with tempfile.TemporaryDirectory(prefix="gomoq-example-") as td:
        pkg_dir = Path(td)
        (pkg_dir / "go.mod").write_text("module example.com/greet\n\ngo 1.22\n", encoding="utf-8")
        (pkg_dir / "greet.go").write_text(
            "package greet\n\ntype Greeter interface {\n    Greet(name string) string\n}\n",
            encoding="utf-8",
        )

        # Same as: gomoq mock <dir> Greeter
        gomoq.Mocker(pkg_dir).mock(sys.stdout, "Greeter")


if __name__ == "__main__":
    main()
