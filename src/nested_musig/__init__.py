"""Binary-tree nested MuSig2 signing for n-of-n Schnorr multisignatures."""
