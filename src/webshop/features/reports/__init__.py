"""Business reports for the webshop admin.

One endpoint returns a period report (daily, weekly, monthly or yearly)
covering revenue, orders, products, users, coupons, reviews, newsletter,
abandoned carts, the inventory snapshot and per product stock movements.
Access requires administrator privileges.

The report is computed on demand from the database and never stored. Window
arithmetic lives in ``periods``, the pure folds in ``aggregators`` and the
database reads in ``service``."""
