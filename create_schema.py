import asyncio
import asyncpg
import os
from dotenv import load_dotenv

load_dotenv('.env')

async def create_schema():
    conn = await asyncpg.connect(os.getenv('DATABASE_URL'))

    tables_sql = '''
        -- Users, keyed by the identity provider subject
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email VARCHAR(255) NOT NULL,
            display_name VARCHAR(100),
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            last_login_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        );

        -- Launch content (products / offers newsletters are written for)
        CREATE TABLE IF NOT EXISTS launch_contents (
            id TEXT PRIMARY KEY,
            user_id TEXT REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(200) NOT NULL,
            description TEXT DEFAULT '',
            target_audience TEXT,
            value_proposition TEXT,
            tone TEXT,
            core_message TEXT,
            launch_content JSONB DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        );

        -- Newsletters
        CREATE TABLE IF NOT EXISTS newsletters (
            id TEXT PRIMARY KEY,
            user_id TEXT REFERENCES users(id) ON DELETE CASCADE,
            launch_content_id TEXT REFERENCES launch_contents(id) ON DELETE SET NULL,
            title VARCHAR(200) NOT NULL,
            content TEXT NOT NULL,
            status VARCHAR(20) DEFAULT 'DRAFT',
            scheduled_at TIMESTAMPTZ,
            sent_at TIMESTAMPTZ,
            hypothesis JSONB,
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        );

        -- Subscribers; email uniqueness is checked on import, not here
        CREATE TABLE IF NOT EXISTS subscribers (
            id TEXT PRIMARY KEY,
            user_id TEXT REFERENCES users(id) ON DELETE CASCADE,
            email VARCHAR(255) NOT NULL,
            name VARCHAR(200),
            tags TEXT[] DEFAULT '{}',
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        );

        -- One row per delivery attempt
        CREATE TABLE IF NOT EXISTS email_sends (
            id TEXT PRIMARY KEY,
            newsletter_id TEXT REFERENCES newsletters(id) ON DELETE CASCADE,
            subscriber_id TEXT REFERENCES subscribers(id) ON DELETE SET NULL,
            recipient VARCHAR(255) NOT NULL,
            subject TEXT,
            status VARCHAR(20) NOT NULL,
            external_id TEXT,
            error TEXT,
            sent_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
        );

        -- Essential indexes
        CREATE INDEX IF NOT EXISTS idx_launch_contents_user ON launch_contents(user_id);
        CREATE INDEX IF NOT EXISTS idx_newsletters_user ON newsletters(user_id);
        CREATE INDEX IF NOT EXISTS idx_subscribers_user ON subscribers(user_id);
        CREATE INDEX IF NOT EXISTS idx_subscribers_user_email ON subscribers(user_id, LOWER(email));
        CREATE INDEX IF NOT EXISTS idx_subscribers_tags ON subscribers USING GIN(tags);
        CREATE INDEX IF NOT EXISTS idx_email_sends_newsletter ON email_sends(newsletter_id);
    '''

    await conn.execute(tables_sql)
    print("Created all database tables")

    await conn.close()
    return True

if __name__ == "__main__":
    success = asyncio.run(create_schema())
    print("Schema creation completed" if success else "Schema creation failed")
