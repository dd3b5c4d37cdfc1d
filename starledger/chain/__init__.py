# starledger/chain/__init__.py
