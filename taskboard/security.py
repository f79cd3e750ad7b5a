from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Checks a plain-text password against a stored hash.
    """
    # bcrypt only looks at the first 72 bytes
    return pwd_context.verify(plain_password[:72], hashed_password)

def get_password_hash(password: str) -> str:
    """
    One-way hashes a password before it is stored on a user.
    """
    return pwd_context.hash(password[:72])
