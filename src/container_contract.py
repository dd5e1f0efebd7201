"""
Dockerfile inspection against the service's container runtime contract.

The contract: a version-pinned base image, working directory ``/app``, a
single exposed port 8080, and the built program launched directly as the
foreground process with no extra arguments.

Only the directives the contract cares about are interpreted (``ARG``,
``FROM``, ``WORKDIR``, ``COPY``, ``RUN``, ``EXPOSE``, ``CMD``,
``ENTRYPOINT``). Line continuations and comments are honoured, and ``ARG``
defaults are substituted into ``FROM``.
"""
from __future__ import annotations

import json
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

_VAR = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::?-([^}]*))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class DockerfileSpec:
    base_image: Optional[str] = None
    args: dict[str, str] = field(default_factory=dict)
    workdir: Optional[str] = None
    copies: list[str] = field(default_factory=list)
    build_commands: list[str] = field(default_factory=list)
    exposed_ports: list[int] = field(default_factory=list)
    cmd: Optional[list[str]] = None
    entrypoint: Optional[list[str]] = None

    @property
    def command(self) -> list[str]:
        """Effective process command: ENTRYPOINT followed by CMD."""
        return list(self.entrypoint or []) + list(self.cmd or [])


@dataclass
class RuntimeContract:
    workdir: str = "/app"
    port: int = 8080
    command: list[str] = field(default_factory=lambda: ["crawchain"])
    require_pinned: bool = True


def _logical_lines(text: str) -> list[str]:
    lines: list[str] = []
    buf = ""
    for raw in text.splitlines():
        stripped = raw.strip()
        if stripped.startswith("#"):
            continue
        if stripped.endswith("\\"):
            buf += stripped[:-1].rstrip() + " "
            continue
        buf += stripped
        if buf.strip():
            lines.append(buf.strip())
        buf = ""
    if buf.strip():
        lines.append(buf.strip())
    return lines


def _substitute(value: str, args: dict[str, str]) -> str:
    def repl(m: re.Match) -> str:
        name = m.group(1) or m.group(3)
        default = m.group(2)
        if name in args and args[name] != "":
            return args[name]
        return default if default is not None else ""

    return _VAR.sub(repl, value)


def _exec_form(value: str) -> list[str]:
    if value.startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list) and all(isinstance(p, str) for p in parsed):
            return parsed
    # Shell form runs under /bin/sh -c
    return ["/bin/sh", "-c", value]


def parse_dockerfile(text: str) -> DockerfileSpec:
    spec = DockerfileSpec()
    for line in _logical_lines(text):
        instruction, _, rest = line.partition(" ")
        instruction = instruction.upper()
        rest = rest.strip()
        if instruction == "ARG":
            name, sep, default = rest.partition("=")
            spec.args[name.strip()] = default.strip().strip('"') if sep else spec.args.get(name.strip(), "")
        elif instruction == "FROM":
            tokens = [t for t in shlex.split(rest) if not t.startswith("--")]
            if tokens:
                spec.base_image = _substitute(tokens[0], spec.args)
        elif instruction == "WORKDIR":
            workdir = _substitute(rest, spec.args)
            if spec.workdir and not workdir.startswith("/"):
                workdir = spec.workdir.rstrip("/") + "/" + workdir
            spec.workdir = workdir
        elif instruction == "COPY":
            spec.copies.append(rest)
        elif instruction == "RUN":
            spec.build_commands.append(rest)
        elif instruction == "EXPOSE":
            for token in rest.split():
                port = token.split("/", 1)[0]
                if port.isdigit():
                    spec.exposed_ports.append(int(port))
        elif instruction == "CMD":
            spec.cmd = _exec_form(rest)
        elif instruction == "ENTRYPOINT":
            spec.entrypoint = _exec_form(rest)
    return spec


def load_dockerfile(path) -> DockerfileSpec:
    return parse_dockerfile(Path(path).read_text(encoding="utf-8"))


def split_image(image: str) -> tuple[str, Optional[str], Optional[str]]:
    """Split ``repo[:tag][@digest]`` into its parts."""
    digest = None
    if "@" in image:
        image, digest = image.split("@", 1)
    tag = None
    last = image.rsplit("/", 1)[-1]
    if ":" in last:
        image, tag = image.rsplit(":", 1)
    return image, tag, digest


def image_is_pinned(image: Optional[str]) -> bool:
    if not image:
        return False
    _, tag, digest = split_image(image)
    if digest:
        return True
    return bool(tag) and tag != "latest"


def check_contract(spec: DockerfileSpec, contract: Optional[RuntimeContract] = None) -> list[str]:
    """Return the list of contract violations, empty when the Dockerfile complies."""
    contract = contract or RuntimeContract()
    issues: list[str] = []
    if not spec.base_image:
        issues.append("no base image (FROM) declared")
    elif contract.require_pinned and not image_is_pinned(spec.base_image):
        issues.append(f"base image {spec.base_image!r} is not pinned to a version (non-reproducible build)")
    if spec.workdir != contract.workdir:
        issues.append(f"working directory is {spec.workdir!r}, expected {contract.workdir!r}")
    if not spec.build_commands:
        issues.append("no build step (RUN) declared")
    if spec.exposed_ports != [contract.port]:
        issues.append(f"exposed ports are {spec.exposed_ports}, expected [{contract.port}]")
    if spec.command != contract.command:
        issues.append(f"entrypoint is {spec.command}, expected {contract.command}")
    return issues


def compare_variants(a: DockerfileSpec, b: DockerfileSpec) -> list[str]:
    """Differences between two variants other than the base image tag."""
    diffs: list[str] = []
    repo_a = split_image(a.base_image or "")[0]
    repo_b = split_image(b.base_image or "")[0]
    if repo_a != repo_b:
        diffs.append(f"base image repository differs: {repo_a!r} vs {repo_b!r}")
    for name in ("workdir", "copies", "build_commands", "exposed_ports", "command"):
        va, vb = getattr(a, name), getattr(b, name)
        if va != vb:
            diffs.append(f"{name} differs: {va!r} vs {vb!r}")
    return diffs


__all__ = [
    "DockerfileSpec",
    "RuntimeContract",
    "parse_dockerfile",
    "load_dockerfile",
    "split_image",
    "image_is_pinned",
    "check_contract",
    "compare_variants",
]
