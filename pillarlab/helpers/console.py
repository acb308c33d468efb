# pillarlab/helpers/console.py
from rich.console import Console

# Consola compartida por la CLI y por el agente para avisos y errores.
console = Console()
