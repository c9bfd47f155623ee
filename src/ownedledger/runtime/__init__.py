# src/ownedledger/runtime/__init__.py
"""
ownedledger runtime

  - ownership: single-owner guard, fixed at construction
  - account_store: account id -> unsigned value mapping, owner-gated privileged read
  - calls / dispatch: explicit-caller call envelopes and their handlers
  - executor: serializes calls against one store and returns receipts

The store and guard hold no locks and know nothing about HTTP or signatures;
those live in the executor and ownedledger.api.
"""
