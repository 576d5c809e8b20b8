from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import service
from .config import load_settings
from .errors import BlackIceError
from .inventory.gateway import Ec2Gateway
from .inventory.resolver import IdentityResolver


def _resolver(args: argparse.Namespace) -> IdentityResolver:
    return IdentityResolver(Ec2Gateway(region_name=args.region, profile_name=args.profile))


def cmd_fingerprint(args: argparse.Namespace) -> int:
    print(service.derive_fingerprint_file(args.pem))
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    result = service.scan(_resolver(args), Path(args.pem).read_bytes())
    print(service.render_json(result, indent=2))
    return 0


def cmd_keypairs(args: argparse.Namespace) -> int:
    print(service.render_json(service.list_key_pairs(_resolver(args)), indent=2))
    return 0


def cmd_instances(args: argparse.Namespace) -> int:
    print(service.render_json(service.list_instances(_resolver(args), args.key_name), indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:  # pragma: no cover - blocks
    import uvicorn
    uvicorn.run("blackice.app:app", host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    s = load_settings()
    p = argparse.ArgumentParser("blackice")
    sub = p.add_subparsers(dest="cmd", required=True)

    def aws_opts(sp):
        sp.add_argument("--region", default=s.aws_region)
        sp.add_argument("--profile", default=s.aws_profile)

    p_fp = sub.add_parser("fingerprint", help="print the EC2 fingerprint of a private key")
    p_fp.add_argument("pem")
    p_fp.set_defaults(func=cmd_fingerprint)

    p_scan = sub.add_parser("scan", help="list instances reachable with a private key")
    p_scan.add_argument("pem")
    aws_opts(p_scan)
    p_scan.set_defaults(func=cmd_scan)

    p_kp = sub.add_parser("keypairs", help="list registered key pairs")
    aws_opts(p_kp)
    p_kp.set_defaults(func=cmd_keypairs)

    p_inst = sub.add_parser("instances", help="list instances launched with a key pair")
    p_inst.add_argument("key_name")
    aws_opts(p_inst)
    p_inst.set_defaults(func=cmd_instances)

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default=s.host)
    p_serve.add_argument("--port", type=int, default=s.port)
    p_serve.add_argument("--log-level", dest="log_level", default=s.log_level)
    p_serve.set_defaults(func=cmd_serve)

    args = p.parse_args(argv)
    try:
        return args.func(args)
    except (BlackIceError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
