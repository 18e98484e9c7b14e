#!/usr/bin/env python
"""
Script helper para migraciones del esquema del sync con Alembic.

Uso:
    python scripts/migrate.py upgrade          # Crear/actualizar tablas odoo_*
    python scripts/migrate.py upgrade --sql    # Solo imprimir el SQL (modo offline)
    python scripts/migrate.py downgrade        # Revertir ultima migracion
    python scripts/migrate.py revision "desc"  # Crear nueva migracion
    python scripts/migrate.py current          # Ver version actual
    python scripts/migrate.py history          # Ver historial de migraciones

La URL se toma de DATABASE_URL (o DATABASE_*), igual que la API de estado.
"""
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv


# Directorio raiz del proyecto (donde vive alembic.ini)
ROOT_DIR = Path(__file__).resolve().parent.parent


def run_alembic(args: list) -> int:
    """
    Ejecuta un comando de Alembic.

    Args:
        args: Lista de argumentos para Alembic

    Returns:
        Codigo de salida del comando
    """
    cmd = ["alembic"] + args
    print(f"Ejecutando: {' '.join(cmd)}", file=sys.stderr)
    print("-" * 50, file=sys.stderr)
    result = subprocess.run(cmd, cwd=ROOT_DIR)
    return result.returncode


def upgrade(target: str = "head", offline: bool = False) -> int:
    """Aplica migraciones hasta el target especificado."""
    args = ["upgrade", target]
    if offline:
        args.append("--sql")
    return run_alembic(args)


def downgrade(target: str = "-1") -> int:
    """Revierte migraciones hasta el target especificado."""
    return run_alembic(["downgrade", target])


def revision(message: str, autogenerate: bool = True) -> int:
    return run_alembic(["revision", "-m", message] + (["--autogenerate"] if autogenerate else []))


def show_help():
    """Muestra ayuda de uso."""
    print(__doc__)


def main():
    """Funcion principal del script."""
    load_dotenv(ROOT_DIR / ".env", override=False)

    if len(sys.argv) < 2:
        show_help()
        sys.exit(1)

    command = sys.argv[1].lower()
    rest = sys.argv[2:]

    if command == "upgrade":
        offline = "--sql" in rest
        targets = [a for a in rest if a != "--sql"]
        sys.exit(upgrade(targets[0] if targets else "head", offline=offline))

    elif command == "downgrade":
        sys.exit(downgrade(rest[0] if rest else "-1"))

    elif command == "revision":
        if not rest:
            print("Error: Falta mensaje para la revision")
            print("Uso: python scripts/migrate.py revision 'descripcion del cambio'")
            sys.exit(1)
        sys.exit(revision(rest[0]))

    elif command == "current":
        sys.exit(run_alembic(["current"]))

    elif command == "history":
        sys.exit(run_alembic(["history", "--verbose"]))

    elif command in ["help", "-h", "--help"]:
        show_help()
        sys.exit(0)

    else:
        print(f"Comando desconocido: {command}")
        show_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
