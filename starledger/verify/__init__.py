# starledger/verify/__init__.py
