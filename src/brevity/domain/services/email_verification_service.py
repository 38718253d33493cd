"""Service for email verification logic.

Handles token generation, sending verification emails, and validating tokens.

The token stored on the account is a random 64-hex-char value. It travels to
the user inside a signed JWT envelope ``{email, token}``; the signature is
checked before the pair is looked up.
"""

from brevity.core.exceptions import InvalidTokenError
from brevity.core.logging import get_logger
from brevity.domain.entities.account import Account
from brevity.infrastructure.auth.jwt_service import JWTError, JWTService, jwt_service
from brevity.infrastructure.persistence.repositories.account_repository import AccountRepository
from brevity.infrastructure.services.email_service import EmailService
from brevity.infrastructure.services.token_service import token_service

logger = get_logger(__name__)


class EmailVerificationService:
    """Service for handling email verification business logic."""

    def __init__(
        self,
        account_repo: AccountRepository,
        email_service: EmailService,
        jwt: JWTService | None = None,
    ) -> None:
        """Initialize the verification service.

        Args:
            account_repo: Repository for account operations.
            email_service: Service for sending emails.
            jwt: Signs and decodes verification envelopes.
        """
        self.account_repo = account_repo
        self.email_service = email_service
        self.jwt = jwt or jwt_service

    async def issue_token(self, account: Account) -> str:
        """Make sure the account has a verification token and wrap it.

        An existing token is reused, so links sent earlier stay valid and
        concurrent issuers converge on the same token.

        Returns:
            Signed verification envelope.

        Raises:
            InvalidTokenError: If the account is already verified.
        """
        token = await self.account_repo.set_verification_token_if_absent(
            account.id, token_service.generate_token(32)
        )
        if token is None:
            raise InvalidTokenError("Email is already verified")
        account.verification_token = token
        return self.jwt.create_verification_envelope(email=account.email, token=token)

    async def send_verification_email(self, account: Account, resend: bool = False) -> bool:
        """Issue a verification envelope and email the link.

        Returns:
            True if the email was handed off successfully, False otherwise.
        """
        envelope = await self.issue_token(account)

        logger.info("Sending verification email", account_id=account.id, resend=resend)
        success = await self.email_service.send_verification_email(account, envelope, resend=resend)
        if not success:
            logger.error("Failed to send verification email", account_id=account.id)
        return success

    async def verify_email(self, envelope: str) -> Account:
        """Consume a verification envelope.

        Marks the email verified, clears the token and activates an inactive
        account. A token can be consumed once.

        Returns:
            The verified account.

        Raises:
            InvalidTokenError: If the envelope is malformed, expired, forged,
                or does not match a pending verification.
        """
        try:
            email, token = self.jwt.decode_verification_envelope(envelope)
        except JWTError as e:
            logger.info("Email verification failed: bad envelope", error=str(e))
            raise InvalidTokenError() from e

        if not await self.account_repo.consume_verification_token(email, token):
            logger.info("Email verification failed: no pending verification")
            raise InvalidTokenError()

        account = await self.account_repo.get_by_email(email)
        logger.info("Email verified successfully", account_id=account.id)
        return account
