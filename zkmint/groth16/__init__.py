"""Groth16 over bn128: R1CS, QAP, setup, proving and verifying."""
