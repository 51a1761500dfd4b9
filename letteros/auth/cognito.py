import boto3
from botocore.exceptions import ClientError
from letteros.config import settings
from letteros.auth.models import SessionUser
import logging

logger = logging.getLogger(__name__)

class CognitoClient:
    def __init__(self):
        self.client = boto3.client('cognito-idp', region_name=settings.aws_region)

    def get_user_info(self, token: str) -> SessionUser:
        """Resolve a token issued by the user pool to the signed-in user"""
        try:
            response = self.client.get_user(AccessToken=token)
        except ClientError as e:
            logger.warning(f"Cognito rejected token: {e.response['Error']['Code']}")
            raise ValueError("Failed to get user information")

        attributes = {attr['Name']: attr['Value'] for attr in response['UserAttributes']}
        user_id = attributes.get('sub') or response.get('Username')
        if not user_id:
            raise ValueError("Identity token has no subject")

        return SessionUser(
            id=user_id,
            email=attributes.get('email', ''),
            name=attributes.get('name')
        )

cognito_client = CognitoClient()
