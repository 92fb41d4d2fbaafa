"""Security primitives, the auth decorator and payload storage."""
