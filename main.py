"""
barry - Mercury account balances and spend/revenue reports.

Fetches accounts and transactions from the Mercury API and prints
aggregate reports to the console. Equivalent to the installed ``barry``
command.
"""

from barry.cli import run


if __name__ == "__main__":
    run()
