from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "users" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "username" VARCHAR(100) NOT NULL UNIQUE,
    "name" VARCHAR(255),
    "email" VARCHAR(255) NOT NULL UNIQUE,
    "hashed_password" VARCHAR(255) NOT NULL,
    "role" VARCHAR(50) NOT NULL DEFAULT 'customer',
    "is_active" INT NOT NULL DEFAULT 1
);
CREATE INDEX IF NOT EXISTS "idx_users_public__5ae1b4" ON "users" ("public_id");
CREATE INDEX IF NOT EXISTS "idx_users_usernam_266d85" ON "users" ("username");
CREATE INDEX IF NOT EXISTS "idx_users_email_133a6f" ON "users" ("email");
CREATE TABLE IF NOT EXISTS "categories" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "name" VARCHAR(100) NOT NULL UNIQUE,
    "description" TEXT
);
CREATE INDEX IF NOT EXISTS "idx_categories_public__b1e0c8" ON "categories" ("public_id");
CREATE TABLE IF NOT EXISTS "products" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "name" VARCHAR(255) NOT NULL,
    "stock" INT NOT NULL DEFAULT 0,
    "price" REAL NOT NULL DEFAULT 0,
    "sale_price" REAL,
    "is_archived" INT NOT NULL DEFAULT 0,
    "category_id" INT REFERENCES "categories" ("id") ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS "idx_products_public__0c3d2e" ON "products" ("public_id");
CREATE TABLE IF NOT EXISTS "product_variants" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "attributes" JSON NOT NULL,
    "stock" INT NOT NULL DEFAULT 0,
    "product_id" INT NOT NULL REFERENCES "products" ("id") ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS "idx_product_var_public__9f41a7" ON "product_variants" ("public_id");
CREATE TABLE IF NOT EXISTS "inventory_logs" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "change" INT NOT NULL /* Signed stock delta */,
    "reason" VARCHAR(32) NOT NULL /* ORDER_PLACED: ORDER_PLACED\nSALE: SALE\nRESTOCK: RESTOCK\nMANUAL_ADJUSTMENT: MANUAL_ADJUSTMENT\nORDER_CANCELLED: ORDER_CANCELLED */,
    "reference_id" VARCHAR(64),
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "product_id" INT NOT NULL REFERENCES "products" ("id") ON DELETE CASCADE,
    "user_id" INT REFERENCES "users" ("id") ON DELETE SET NULL,
    "variant_id" INT REFERENCES "product_variants" ("id") ON DELETE SET NULL
);
CREATE TABLE IF NOT EXISTS "orders" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "order_id" VARCHAR(50) NOT NULL UNIQUE /* Pattern: <year+0000> e.g. 20250001 */,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "contact_name" VARCHAR(255) NOT NULL,
    "contact_email" VARCHAR(255) NOT NULL,
    "delivery_address" TEXT NOT NULL,
    "status" VARCHAR(20) NOT NULL DEFAULT 'pending' /* PENDING: pending\nPAID: paid\nSHIPPED: shipped\nCOMPLETED: completed\nCANCELLED: cancelled */,
    "total_price" REAL NOT NULL DEFAULT 0,
    "discount_amount" REAL NOT NULL DEFAULT 0,
    "loyalty_discount" REAL NOT NULL DEFAULT 0,
    "payment_method" VARCHAR(50),
    "coupon_code" VARCHAR(50),
    "user_id" INT REFERENCES "users" ("id") ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS "idx_orders_public__32168a" ON "orders" ("public_id");
CREATE INDEX IF NOT EXISTS "idx_orders_coupon__7d0e55" ON "orders" ("coupon_code");
CREATE TABLE IF NOT EXISTS "order_items" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "name" VARCHAR(255) NOT NULL,
    "price" REAL NOT NULL /* Unit price at the time of purchase */,
    "quantity" INT NOT NULL,
    "order_id" INT NOT NULL REFERENCES "orders" ("id") ON DELETE CASCADE,
    "product_id" INT REFERENCES "products" ("id") ON DELETE SET NULL,
    "variant_id" INT REFERENCES "product_variants" ("id") ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS "idx_order_items_public__e0a5f3" ON "order_items" ("public_id");
CREATE TABLE IF NOT EXISTS "coupons" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "code" VARCHAR(50) NOT NULL UNIQUE,
    "discount_type" VARCHAR(20) NOT NULL /* PERCENTAGE: percentage\nFIXED: fixed */,
    "discount_value" REAL NOT NULL,
    "is_active" INT NOT NULL DEFAULT 1,
    "used_count" INT NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS "reviews" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "rating" SMALLINT NOT NULL /* 1 to 5 */,
    "text" TEXT,
    "status" VARCHAR(20) NOT NULL DEFAULT 'pending' /* PENDING: pending\nAPPROVED: approved\nREJECTED: rejected */,
    "product_id" INT NOT NULL REFERENCES "products" ("id") ON DELETE CASCADE,
    "user_id" INT REFERENCES "users" ("id") ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS "idx_reviews_public__41c9d0" ON "reviews" ("public_id");
CREATE TABLE IF NOT EXISTS "newsletter_subscribers" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "email" VARCHAR(255) NOT NULL UNIQUE,
    "is_active" INT NOT NULL DEFAULT 1
);
CREATE TABLE IF NOT EXISTS "carts" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "public_id" VARCHAR(27) NOT NULL UNIQUE,
    "user_id" INT REFERENCES "users" ("id") ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS "idx_carts_public__a87b21" ON "carts" ("public_id");
CREATE TABLE IF NOT EXISTS "cart_items" (
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "quantity" INT NOT NULL DEFAULT 1,
    "cart_id" INT NOT NULL REFERENCES "carts" ("id") ON DELETE CASCADE,
    "product_id" INT NOT NULL REFERENCES "products" ("id") ON DELETE CASCADE,
    "variant_id" INT REFERENCES "product_variants" ("id") ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSON NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        """
