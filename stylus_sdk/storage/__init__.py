"""Storage cache of 32-byte EVM words and accessors for primitives, byte strings and vectors."""