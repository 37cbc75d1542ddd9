"""clinsim Core -- 学习事件数据模型与分类表"""
