# starledger/cli/__init__.py
