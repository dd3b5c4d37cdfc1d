# starledger/core/__init__.py
