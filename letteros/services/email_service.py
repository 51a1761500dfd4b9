# letteros/services/email_service.py - AWS SES newsletter delivery
import re
import html
import boto3
from botocore.exceptions import ClientError
from typing import Optional, Dict, Any
from letteros.config import settings
import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")

def format_content_html(content: str) -> str:
    """Paragraphs, line breaks and **bold** / *italic* markup to HTML"""
    text = html.escape(content)
    text = text.replace("\n\n", "</p><p>").replace("\n", "<br/>")
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    text = _ITALIC.sub(r"<em>\1</em>", text)
    return f"<p>{text}</p>"

class EmailService:
    def __init__(self):
        self.ses_client = boto3.client('sesv2', region_name=settings.aws_region)
        self.from_email = settings.from_email
        self.support_email = settings.support_email
        self.executor = ThreadPoolExecutor(max_workers=5)
        logger.info(f"Email service initialized (region={settings.aws_region}, from={self.from_email})")

    async def send_newsletter_email(
        self,
        to_email: str,
        title: str,
        content: str,
        product_name: Optional[str] = None,
        unsubscribe_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """Render a newsletter and deliver it to one recipient"""
        html_content = self.render_newsletter_html(title, content, product_name, unsubscribe_url)
        text_content = self.render_newsletter_text(title, content, product_name, unsubscribe_url)
        return await self._send_email_async(
            to_email=to_email,
            subject=title,
            html_content=html_content,
            text_content=text_content
        )

    async def _send_email_async(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str,
        reply_to: Optional[str] = None
    ) -> Dict[str, Any]:
        """Send email using AWS SES (async wrapper)"""
        loop = asyncio.get_event_loop()

        # boto3 is blocking
        return await loop.run_in_executor(
            self.executor,
            self._send_email_ses,
            to_email,
            subject,
            html_content,
            text_content,
            reply_to
        )

    def _send_email_ses(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str,
        reply_to: Optional[str] = None
    ) -> Dict[str, Any]:
        try:
            email_params = {
                'FromEmailAddress': f"{settings.sender_name} <{self.from_email}>",
                'Destination': {
                    'ToAddresses': [to_email]
                },
                'Content': {
                    'Simple': {
                        'Subject': {
                            'Data': subject,
                            'Charset': 'UTF-8'
                        },
                        'Body': {
                            'Html': {
                                'Data': html_content,
                                'Charset': 'UTF-8'
                            },
                            'Text': {
                                'Data': text_content,
                                'Charset': 'UTF-8'
                            }
                        }
                    }
                },
                'ReplyToAddresses': [reply_to or self.support_email or self.from_email]
            }
            if settings.ses_configuration_set:
                email_params['ConfigurationSetName'] = settings.ses_configuration_set

            response = self.ses_client.send_email(**email_params)
            logger.info(f"SES accepted email to {to_email}: {response.get('MessageId')}")

            return {
                'success': True,
                'message_id': response.get('MessageId'),
                'to_email': to_email
            }

        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"SES client error for {to_email}: {error_code} {error_message}")

            if error_code == 'MessageRejected':
                raise ValueError(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                raise ValueError("Sender domain not verified with AWS SES")
            elif error_code == 'SendingPausedException':
                raise ValueError("SES sending is paused - check your account status")
            elif error_code == 'AccountSendingPausedException':
                raise ValueError("Account sending paused - likely due to bounce/complaint rate")
            else:
                raise ValueError(f"Email delivery failed: {error_message}")

        except Exception as e:
            logger.error(f"Unexpected error sending email to {to_email}: {e!r}")
            raise ValueError(f"Email sending failed: {e}")

    def render_newsletter_html(
        self,
        title: str,
        content: str,
        product_name: Optional[str] = None,
        unsubscribe_url: Optional[str] = None
    ) -> str:
        sender = html.escape(product_name or settings.sender_name)
        header = ""
        if product_name:
            header = f'<div class="header">{html.escape(product_name)}</div>'
        unsubscribe = ""
        if unsubscribe_url:
            unsubscribe = f'<p><a href="{html.escape(unsubscribe_url)}" class="unsubscribe">Unsubscribe</a></p>'

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>{html.escape(title)}</title>
            <style>
                body {{
                    background-color: #f6f9fc;
                    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Ubuntu, sans-serif;
                }}
                .container {{
                    background: #ffffff;
                    margin: 0 auto;
                    padding: 20px 0 48px;
                    max-width: 600px;
                }}
                .header {{
                    padding: 24px 48px;
                    border-bottom: 1px solid #e6ebf1;
                    color: #525f7f;
                    font-size: 14px;
                    font-weight: 600;
                }}
                .content {{
                    padding: 24px 48px;
                    color: #333333;
                    font-size: 16px;
                    line-height: 26px;
                }}
                .footer {{
                    padding: 0 48px;
                    color: #8898aa;
                    font-size: 12px;
                    border-top: 1px solid #e6ebf1;
                }}
                .unsubscribe {{
                    color: #8898aa;
                    text-decoration: underline;
                }}
            </style>
        </head>
        <body>
            <div class="container">
                {header}
                <div class="content">
                    <h1>{html.escape(title)}</h1>
                    {format_content_html(content)}
                </div>
                <div class="footer">
                    <p>This email was sent by {sender}</p>
                    {unsubscribe}
                    <p>Powered by LetterOS</p>
                </div>
            </div>
        </body>
        </html>
        """

    def render_newsletter_text(
        self,
        title: str,
        content: str,
        product_name: Optional[str] = None,
        unsubscribe_url: Optional[str] = None
    ) -> str:
        lines = [title, "", content, "", "---", f"This email was sent by {product_name or settings.sender_name}"]
        if unsubscribe_url:
            lines.append(f"Unsubscribe: {unsubscribe_url}")
        return "\n".join(lines)

# Global email service instance
email_service = EmailService()
