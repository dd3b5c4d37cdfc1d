# starledger/crypto/__init__.py
