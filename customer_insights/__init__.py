# Customer Insights: read-only aggregate queries over a customers/orders dataset
